"""
Shared fixtures.

Tests never touch the real clock or the real event loop: the store gets a
fixed "today" and a manual FakeLoop whose time only moves on advance().
"""

import heapq
import itertools
from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from finledger.config.settings import (
    LedgerSettings,
    PersistenceSettings,
    StorageSettings,
)
from finledger.models.ledger import Entry, LedgerDocument
from finledger.orchestrator import LedgerApp
from finledger.services.storage import InMemoryStorage, StorageError
from finledger.store import LedgerStore


TODAY = date(2024, 2, 1)


class FakeHandle:

    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Manual clock with asyncio's call_later() shape."""

    def __init__(self):
        self.now = 0.0
        self._timers: list = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle()
        heapq.heappush(
            self._timers,
            (self.now + delay, next(self._seq), handle, callback, args),
        )
        return handle

    @property
    def scheduled(self) -> int:
        return sum(1 for t in self._timers if not t[2].cancelled)

    def advance(self, seconds: float) -> None:
        """Move time forward, running every timer that comes due."""
        target = self.now + seconds
        while self._timers and self._timers[0][0] <= target:
            when, _, handle, callback, args = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            self.now = when
            callback(*args)
        self.now = target


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("disk unavailable")
        super().write(key, value)


class ConfirmRecorder:
    """Confirmation callback answering from a script and recording prompts."""

    def __init__(self, *answers: bool):
        self._answers = list(answers)
        self.messages: list[str] = []

    def __call__(self, message: str) -> bool:
        self.messages.append(message)
        return self._answers.pop(0) if self._answers else False


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings()


@pytest.fixture
def persistence_settings() -> PersistenceSettings:
    return PersistenceSettings(debounce_ms=500, autosave_interval_seconds=30.0)


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def flaky_storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def make_store(storage_settings, persistence_settings, ledger_settings):
    """Factory building a store over any storage, optionally with a loop."""

    def _make(storage, loop=None, load=False):
        kwargs = dict(
            loop=loop,
            storage_settings=storage_settings,
            persistence_settings=persistence_settings,
            ledger_settings=ledger_settings,
            clock=lambda: TODAY,
        )
        if load:
            return LedgerStore.load(storage, **kwargs)
        return LedgerStore(storage, **kwargs)

    return _make


@pytest.fixture
def store(make_store, storage) -> LedgerStore:
    """Store without a loop: debounced writes happen immediately."""
    return make_store(storage)


@pytest.fixture
def looped_store(make_store, storage, loop) -> LedgerStore:
    return make_store(storage, loop=loop)


@pytest.fixture
def app(store) -> LedgerApp:
    return LedgerApp(store)


@pytest.fixture
def looped_app(looped_store) -> LedgerApp:
    return LedgerApp(looped_store)


@pytest.fixture
def make_entry():
    """Factory for entries with sensible defaults."""

    def _make(
        name: str = "Rent",
        amount: str = "100.00",
        entry_date: date = date(2024, 2, 10),
        category: str = None,
    ) -> Entry:
        return Entry(
            name=name,
            amount=Decimal(amount),
            entry_date=entry_date,
            category=category,
        )

    return _make


def stored_document(storage, settings: StorageSettings) -> LedgerDocument:
    """The document as last written to storage."""
    return LedgerDocument.model_validate_json(storage.read(settings.document_key))


@pytest.fixture
def read_stored(storage, storage_settings):
    return lambda: stored_document(storage, storage_settings)
