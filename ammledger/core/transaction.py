"""
All-or-nothing execution for ledger operations.

Each public operation runs inside a `Transaction`. Every mutation registers
a compensating undo; if anything raises before the block exits, the undos
run in reverse order and the original exception propagates. Events are
buffered and published only on commit.

`PoolLocks` gives each pool a single writer: operations on the same pool id
serialize, operations on different pools do not block each other.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from ..errors import InvariantViolation
from .events import Event, EventLog

logger = logging.getLogger(__name__)

UndoFn = Callable[[], None]


class RollbackError(RuntimeError):
    """An undo action failed; ledger state may be inconsistent."""


class Transaction:
    def __init__(
        self,
        name: str,
        *,
        events: Optional[EventLog] = None,
        post_check: Optional[Callable[[], List[str]]] = None,
    ) -> None:
        self.name = name
        self.events = events
        # post_check returns invariant violations; any violation rolls back.
        self.post_check = post_check
        self._undo: List[UndoFn] = []
        self._pending: List[Event] = []
        self._active = False

    def __enter__(self) -> "Transaction":
        if self._active:
            raise RuntimeError(f"transaction {self.name} already entered")
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._active = False
        if exc_type is not None:
            self._rollback(reason=exc)
            return False  # re-raise

        if self.post_check is not None:
            violations = self.post_check()
            if violations:
                err = InvariantViolation(violations)
                self._rollback(reason=err)
                raise err

        self._undo.clear()
        if self.events is not None:
            for event in self._pending:
                self.events.publish(event)
        self._pending.clear()
        return False

    def record(self, undo: UndoFn) -> None:
        """Register the compensating action for a mutation that just applied."""
        if not self._active:
            raise RuntimeError(f"transaction {self.name} is not active")
        self._undo.append(undo)

    def emit(self, event: Event) -> None:
        """Buffer an event until commit."""
        self._pending.append(event)

    def _rollback(self, *, reason: BaseException) -> None:
        self._pending.clear()
        if not self._undo:
            return
        logger.warning("rolling back %s (%d steps): %s", self.name, len(self._undo), reason)
        failures: List[BaseException] = []
        while self._undo:
            undo = self._undo.pop()
            try:
                undo()
            except Exception as undo_exc:
                logger.exception("undo step failed in %s", self.name)
                failures.append(undo_exc)
        if failures:
            raise RollbackError(f"{len(failures)} undo step(s) failed in {self.name}") from failures[0]


class PoolLocks:
    """Lazily created re-entrant lock per pool id."""

    def __init__(self) -> None:
        self._locks: Dict[int, threading.RLock] = {}
        self._guard = threading.Lock()

    def lock_for(self, pool_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(pool_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[pool_id] = lock
            return lock

    @contextmanager
    def hold(self, pool_id: int) -> Iterator[None]:
        with self.lock_for(pool_id):
            yield
