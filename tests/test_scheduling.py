"""Tests for the debouncer and the autosave backstop."""

import pytest

from finledger.services.scheduling import AutosaveTimer, Debouncer


class Counter:

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestDebouncer:
    """Tests for coalescing bursts of triggers."""

    def test_burst_produces_one_call(self, loop):
        counter = Counter()
        debouncer = Debouncer(loop, 0.5, counter)

        for _ in range(5):
            debouncer.trigger()
            loop.advance(0.1)
        assert counter.calls == 0

        loop.advance(0.45)
        assert counter.calls == 1
        assert not debouncer.pending

    def test_each_trigger_restarts_the_interval(self, loop):
        counter = Counter()
        debouncer = Debouncer(loop, 0.5, counter)

        debouncer.trigger()
        loop.advance(0.4)
        debouncer.trigger()
        loop.advance(0.4)
        assert counter.calls == 0
        loop.advance(0.2)
        assert counter.calls == 1

    def test_flush_runs_pending_call_now(self, loop):
        counter = Counter()
        debouncer = Debouncer(loop, 0.5, counter)
        debouncer.trigger()

        assert debouncer.flush() is True
        assert counter.calls == 1

        loop.advance(1.0)
        assert counter.calls == 1

    def test_flush_without_pending_call(self, loop):
        counter = Counter()
        assert Debouncer(loop, 0.5, counter).flush() is False
        assert counter.calls == 0

    def test_cancel(self, loop):
        counter = Counter()
        debouncer = Debouncer(loop, 0.5, counter)
        debouncer.trigger()
        debouncer.cancel()
        loop.advance(1.0)
        assert counter.calls == 0


class TestAutosaveTimer:
    """Tests for the periodic backstop."""

    def test_fires_every_interval(self, loop):
        counter = Counter()
        timer = AutosaveTimer(loop, 30.0, counter)
        timer.start()

        loop.advance(29.9)
        assert counter.calls == 0
        loop.advance(0.2)
        assert counter.calls == 1
        loop.advance(60.0)
        assert counter.calls == 3

    def test_start_twice_schedules_once(self, loop):
        timer = AutosaveTimer(loop, 30.0, Counter())
        timer.start()
        timer.start()
        assert loop.scheduled == 1

    def test_stop(self, loop):
        counter = Counter()
        timer = AutosaveTimer(loop, 30.0, counter)
        timer.start()
        timer.stop()
        loop.advance(120.0)
        assert counter.calls == 0
        assert not timer.running

    def test_keeps_running_after_failing_callback(self, loop):
        def boom():
            raise RuntimeError("boom")

        timer = AutosaveTimer(loop, 30.0, boom)
        timer.start()
        with pytest.raises(RuntimeError):
            loop.advance(30.0)
        assert timer.running


class TestStoreBackstop:
    """Tests for autosave bounding data loss during continuous edits."""

    def test_continuous_typing_is_saved_by_autosave(self, looped_app, loop):
        """The debounce never fires while typing; autosave still writes."""
        storage = looped_app.store.storage
        note = looped_app.notes.create_note()
        looped_app.start()

        for i in range(160):
            looped_app.notes.input(note.id, "x" * i)
            loop.advance(0.2)

        assert storage.write_count >= 1
        assert looped_app.store.has_pending_write

    def test_autosave_without_pending_changes_does_not_write(self, looped_app, loop):
        looped_app.start()
        loop.advance(90.0)
        assert looped_app.store.storage.write_count == 0

    def test_shutdown_stops_timer_and_flushes(self, looped_app, loop):
        note = looped_app.notes.create_note()
        looped_app.notes.input(note.id, "bye")
        looped_app.start()
        looped_app.shutdown()

        writes = looped_app.store.storage.write_count
        assert writes == 1
        loop.advance(120.0)
        assert looped_app.store.storage.write_count == writes


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
