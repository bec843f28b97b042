"""
Storage Services Package

Provides the abstract key/value interface and its implementations.
"""

from finledger.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
)
from finledger.services.storage.json_file import JsonFileStorage
from finledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
