"""
Deferred Write Scheduling

Two timers coordinate persistence:

- Debouncer: every trigger cancels the pending timer and starts a new one,
  so a burst of triggers produces a single call after a quiet interval.
- AutosaveTimer: a periodic backstop that fires every N seconds no matter
  how busy the user is, so a continuous burst cannot postpone a write
  forever.

Both are driven by an event loop's `call_later(delay, callback)`, which
returns a handle with `cancel()`. An asyncio loop satisfies this; tests use
a manual clock with the same two methods.
"""

from typing import Any, Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerLoop(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class Debouncer:
    """Coalesce bursts of triggers into one deferred call."""

    def __init__(
        self,
        loop: TimerLoop,
        delay_seconds: float,
        callback: Callable[[], Any],
    ):
        self._loop = loop
        self._delay = delay_seconds
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """(Re)start the quiet interval."""
        self.cancel()
        self._handle = self._loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> bool:
        """
        Run the pending call now.

        Returns True if a call was pending.
        """
        if self._handle is None:
            return False
        self.cancel()
        self._callback()
        return True

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class AutosaveTimer:
    """Call `callback` every `interval_seconds` until stopped."""

    def __init__(
        self,
        loop: TimerLoop,
        interval_seconds: float,
        callback: Callable[[], Any],
    ):
        self._loop = loop
        self._interval = interval_seconds
        self._callback = callback
        self._handle: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        if self._handle is None:
            self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._tick)

    def _tick(self) -> None:
        # Reschedule first so a failing callback does not stop the backstop
        self._schedule()
        self._callback()
