"""
Abstract Storage Interface

The ledger persists a handful of string values under string keys: one JSON
blob with the whole document plus two scalar onboarding flags. Any backend
that can read, write and remove a value by key can hold the ledger.

Writes are synchronous. The document is small and serialized in memory,
so a write is expected to be fast.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key/value document storage.

    Any storage implementation (JSON files, in-memory, ...) must implement
    these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            QuotaExceededError: If the value is larger than the backend allows
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass

    def contains(self, key: str) -> bool:
        return self.read(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """The value does not fit in the storage quota."""

    def __init__(self, key: str, size: int, quota: int):
        self.key = key
        self.size = size
        self.quota = quota
        super().__init__(
            f"Value for {key!r} is {size} bytes, quota is {quota} bytes"
        )
