"""Services package."""

from finledger.services.scheduling import AutosaveTimer, Debouncer
from finledger.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
)

__all__ = [
    # Scheduling
    "AutosaveTimer",
    "Debouncer",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "QuotaExceededError",
    "StorageError",
]
