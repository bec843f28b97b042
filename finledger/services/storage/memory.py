"""In-memory storage, used by tests and throwaway sessions."""

from typing import Optional

from finledger.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
)


class InMemoryStorage(KeyValueStorageInterface):

    def __init__(self, quota_bytes: int = 0):
        self._values: dict[str, str] = {}
        self._quota = quota_bytes
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self._quota and size > self._quota:
            raise QuotaExceededError(key, size, self._quota)
        self._values[key] = value
        self.write_count += 1

    def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._values)
