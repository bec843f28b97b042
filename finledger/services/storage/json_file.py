"""
JSON File Storage Implementation

Each key is stored as one UTF-8 file inside a data directory. Writes go to
a temporary file first and are then renamed over the target, so a crash
mid-write leaves the previous value intact.

An optional byte quota mirrors the size limit of browser-style local
storage: oversized values are refused with QuotaExceededError.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from finledger.config import get_settings
from finledger.config.settings import StorageSettings
from finledger.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
)


FILE_SUFFIX = ".json"


class JsonFileStorage(KeyValueStorageInterface):
    """Key/value storage backed by one file per key."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        quota_bytes: Optional[int] = None,
        settings: Optional[StorageSettings] = None,
    ):
        settings = settings or get_settings().storage
        self._data_dir = Path(data_dir or settings.data_dir).expanduser()
        self._quota = settings.quota_bytes if quota_bytes is None else quota_bytes

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{FILE_SUFFIX}"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        data = value.encode("utf-8")
        if self._quota and len(data) > self._quota:
            raise QuotaExceededError(key, len(data), self._quota)

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {key!r}: {e}") from e

    def remove(self, key: str) -> bool:
        path = self._path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove {key!r}: {e}") from e

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(FILE_SUFFIX)]
            for p in self._data_dir.glob(f"*{FILE_SUFFIX}")
            if not p.name.startswith(".")
        )
