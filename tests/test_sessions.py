"""Tests for edit sessions and the debouncer."""

import pytest

from bankrecon.domain.errors import PersistenceFailure, ValidationError
from bankrecon.domain.sessions import Debouncer, EditSessionRegistry


class FakeTimer:
    """threading.Timer stand-in that fires only when told to."""

    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


class TimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=()):
        timer = FakeTimer(interval, function, args)
        self.timers.append(timer)
        return timer


@pytest.fixture
def timers():
    return TimerFactory()


@pytest.fixture
def writes():
    return []


@pytest.fixture
def debouncer(timers, writes):
    def write(transaction_id, field, value):
        writes.append((transaction_id, field, value))

    return Debouncer(write, delay=0.5, timer_factory=timers)


class TestDebouncer:
    """Tests for Debouncer."""

    def test_timer_is_started_with_delay(self, debouncer, timers, writes):
        debouncer.submit("T1", "notes", "a")

        assert timers.timers[0].started
        assert timers.timers[0].daemon
        assert timers.timers[0].interval == 0.5
        assert writes == []
        assert debouncer.has_pending("T1", "notes")

    def test_only_last_value_is_written(self, debouncer, timers, writes):
        """Test that a new value supersedes the pending one."""
        debouncer.submit("T1", "notes", "a")
        debouncer.submit("T1", "notes", "ab")

        assert timers.timers[0].cancelled
        timers.timers[1].fire()

        assert writes == [("T1", "notes", "ab")]
        assert not debouncer.has_pending("T1")

    def test_stale_timer_does_not_write(self, debouncer, timers, writes):
        debouncer.submit("T1", "notes", "a")
        debouncer.submit("T1", "notes", "ab")

        # Fire the superseded timer as if cancel lost the race
        timers.timers[0].function(*timers.timers[0].args)

        assert writes == []
        assert debouncer.pending() == {("T1", "notes"): "ab"}

    def test_keys_are_independent(self, debouncer, timers, writes):
        debouncer.submit("T1", "notes", "x")
        debouncer.submit("T1", "external_reference", "INV-1")
        debouncer.submit("T2", "notes", "y")

        timers.timers[1].fire()

        assert writes == [("T1", "external_reference", "INV-1")]
        assert debouncer.pending() == {("T1", "notes"): "x", ("T2", "notes"): "y"}

    def test_flush_writes_now(self, debouncer, timers, writes):
        debouncer.submit("T1", "notes", "x")
        debouncer.submit("T2", "notes", "y")

        assert debouncer.flush("T1") == 1
        assert writes == [("T1", "notes", "x")]
        assert timers.timers[0].cancelled
        assert debouncer.pending() == {("T2", "notes"): "y"}

    def test_flush_failure_keeps_value_pending(self, timers):
        def write(transaction_id, field, value):
            raise PersistenceFailure("database is locked")

        debouncer = Debouncer(write, timer_factory=timers)
        debouncer.submit("T1", "notes", "x")

        with pytest.raises(PersistenceFailure):
            debouncer.flush()

        assert debouncer.pending() == {("T1", "notes"): "x"}

    def test_cancel_drops_value(self, debouncer, timers, writes):
        debouncer.submit("T1", "notes", "x")

        assert debouncer.cancel("T1", "notes") == 1
        timers.timers[0].fire()

        assert writes == []
        assert debouncer.pending() == {}

    def test_timer_failure_is_recorded(self, timers):
        def write(transaction_id, field, value):
            raise PersistenceFailure("database is locked")

        debouncer = Debouncer(write, timer_factory=timers)
        debouncer.submit("T1", "notes", "x")
        timers.timers[0].fire()

        assert len(debouncer.failures) == 1
        key, error = debouncer.failures[0]
        assert key == ("T1", "notes")
        assert isinstance(error, PersistenceFailure)


class TestEditSessionRegistry:
    """Tests for EditSessionRegistry."""

    def test_open_and_close(self):
        registry = EditSessionRegistry()
        session = registry.open("T1", "notes")

        assert registry.is_open("T1")
        assert registry.open_sessions("T1") == [session]

        registry.commit(session)
        assert not registry.is_open("T1")

    def test_queued_refresh_released_after_last_session(self):
        released = []
        registry = EditSessionRegistry(on_release=released.append)
        notes = registry.open("T1", "notes")
        reference = registry.open("T1", "external_reference")

        registry.queue_refresh("T1")
        assert registry.commit(notes) is False
        assert released == []
        assert registry.has_queued_refresh("T1")

        assert registry.abandon(reference) is True
        assert released == ["T1"]
        assert not registry.has_queued_refresh("T1")

    def test_no_release_without_queued_refresh(self):
        released = []
        registry = EditSessionRegistry(on_release=released.append)
        assert registry.commit(registry.open("T1", "notes")) is False
        assert released == []

    def test_closing_twice_raises(self):
        registry = EditSessionRegistry()
        session = registry.open("T1", "notes")
        registry.commit(session)

        with pytest.raises(ValidationError):
            registry.abandon(session)

    def test_open_requires_field(self):
        with pytest.raises(ValidationError):
            EditSessionRegistry().open("T1", "")
