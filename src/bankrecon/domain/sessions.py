"""Edit sessions and debounced persistence.

An edit session marks a transaction field as being edited. While any session
is open on a transaction, refreshes of that transaction are queued instead of
overwriting the edit; closing the last session releases the queued refresh.
"""

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from bankrecon.domain.errors import DomainError, ValidationError
from bankrecon.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


@dataclass(frozen=True)
class EditSession:
    """Token for one in-progress field edit."""

    transaction_id: str
    field: str
    token: str = field(default_factory=lambda: uuid.uuid4().hex)


class EditSessionRegistry:
    """Track open edit sessions and refreshes queued behind them."""

    def __init__(self, on_release: Optional[Callable[[str], None]] = None):
        """Initialize the registry.

        Args:
            on_release: Called with a transaction ID when its last session
                closes and a refresh was queued for it
        """
        self.on_release = on_release
        self._lock = threading.RLock()
        self._sessions: dict[str, EditSession] = {}
        self._queued: set[str] = set()

    def open(self, transaction_id: str, field: str) -> EditSession:
        if not transaction_id or not field:
            raise ValidationError("Transaction ID and field are required to open an edit session")
        session = EditSession(transaction_id=transaction_id, field=field)
        with self._lock:
            self._sessions[session.token] = session
        return session

    def commit(self, session: EditSession) -> bool:
        """Close a session after its edit was saved.

        Returns:
            True when closing released a queued refresh
        """
        return self._close(session)

    def abandon(self, session: EditSession) -> bool:
        """Close a session whose edit was discarded.

        Returns:
            True when closing released a queued refresh
        """
        return self._close(session)

    def is_open(self, transaction_id: str) -> bool:
        with self._lock:
            return any(s.transaction_id == transaction_id for s in self._sessions.values())

    def open_sessions(self, transaction_id: Optional[str] = None) -> list[EditSession]:
        with self._lock:
            return [
                s
                for s in self._sessions.values()
                if transaction_id is None or s.transaction_id == transaction_id
            ]

    def queue_refresh(self, transaction_id: str) -> None:
        with self._lock:
            self._queued.add(transaction_id)

    def has_queued_refresh(self, transaction_id: str) -> bool:
        with self._lock:
            return transaction_id in self._queued

    def _close(self, session: EditSession) -> bool:
        with self._lock:
            if self._sessions.pop(session.token, None) is None:
                raise ValidationError(f"Edit session on {session.transaction_id}.{session.field} is not open")
            release = session.transaction_id in self._queued and not self.is_open(session.transaction_id)
            if release:
                self._queued.discard(session.transaction_id)

        if release:
            logger.debug("Applying queued refresh for transaction %s", session.transaction_id)
            if self.on_release is not None:
                self.on_release(session.transaction_id)
        return release


class Debouncer:
    """Buffer free-text edits and write them after a quiet period.

    Values are keyed by ``(transaction_id, field)``; each new value restarts
    that key's timer. ``flush`` writes pending values immediately.
    """

    def __init__(
        self,
        write: Callable[[str, str, Any], Any],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        """Initialize the debouncer.

        Args:
            write: Callback ``write(transaction_id, field, value)``
            delay: Quiet period in seconds
            timer_factory: ``threading.Timer`` compatible factory
        """
        self.write = write
        self.delay = delay
        self.timer_factory = timer_factory
        self.failures: list[tuple[tuple[str, str], DomainError]] = []
        self._lock = threading.Lock()
        self._pending: dict[tuple[str, str], tuple[Any, int, Any]] = {}
        self._generation = 0

    def submit(self, transaction_id: str, field: str, value: Any) -> None:
        key = (transaction_id, field)
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None:
                previous[2].cancel()
            self._generation += 1
            timer = self.timer_factory(self.delay, self._fire, args=(key, self._generation))
            timer.daemon = True
            self._pending[key] = (value, self._generation, timer)
        timer.start()

    def pending(self) -> dict[tuple[str, str], Any]:
        with self._lock:
            return {key: entry[0] for key, entry in self._pending.items()}

    def has_pending(self, transaction_id: str, field: Optional[str] = None) -> bool:
        with self._lock:
            return any(
                key[0] == transaction_id and (field is None or key[1] == field)
                for key in self._pending
            )

    def flush(self, transaction_id: Optional[str] = None, field: Optional[str] = None) -> int:
        """Write pending values now.

        Errors propagate to the caller; values not yet written stay pending.

        Returns:
            Number of values written
        """
        taken = self._take(transaction_id, field)
        for _, (_, _, timer) in taken:
            timer.cancel()

        written = 0
        try:
            for (txn_id, name), (value, _, _) in taken:
                self.write(txn_id, name, value)
                written += 1
        finally:
            unwritten = taken[written:]
            with self._lock:
                for key, entry in unwritten:
                    self._pending.setdefault(key, entry)
        return written

    def cancel(self, transaction_id: Optional[str] = None, field: Optional[str] = None) -> int:
        """Drop pending values without writing them."""
        dropped = 0
        for _, (_, _, timer) in self._take(transaction_id, field):
            timer.cancel()
            dropped += 1
        return dropped

    def _take(self, transaction_id: Optional[str], field: Optional[str]):
        with self._lock:
            keys = [
                key
                for key in self._pending
                if (transaction_id is None or key[0] == transaction_id)
                and (field is None or key[1] == field)
            ]
            return [(key, self._pending.pop(key)) for key in keys]

    def _fire(self, key: tuple[str, str], generation: int) -> None:
        with self._lock:
            entry = self._pending.get(key)
            if entry is None or entry[1] != generation:
                return
            del self._pending[key]

        try:
            self.write(key[0], key[1], entry[0])
        except DomainError as e:
            logger.error("Debounced write of %s for transaction %s failed: %s", key[1], key[0], e)
            self.failures.append((key, e))
