from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import TYPE_CHECKING

from payment_lifecycle.application.ports import LockProvider

if TYPE_CHECKING:
    from collections.abc import Iterator


class InMemoryLockProvider(LockProvider):
    """In-memory lock provider using one lock per payment id.

    Two-phase:
    1. Global lock protects the lock dictionary and holder counts
    2. Payment lock serializes confirmations of that payment only

    Confirmations of different payments never wait on each other; the
    global lock is held only for dictionary bookkeeping. An entry is
    evicted when its last holder or waiter leaves, so the dictionary only
    contains ids that are currently being confirmed.

    Limitations:
    - Single-process only (locks don't work across processes)
    """

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = {}
        self._holders: dict[str, int] = {}
        self._global_lock = Lock()

    @contextmanager
    def acquire(self, resource_id: str) -> Iterator[None]:
        with self._global_lock:
            lock = self._locks.setdefault(resource_id, Lock())
            self._holders[resource_id] = self._holders.get(resource_id, 0) + 1

        try:
            with lock:
                yield
        finally:
            with self._global_lock:
                self._holders[resource_id] -= 1
                if self._holders[resource_id] == 0:
                    del self._holders[resource_id]
                    del self._locks[resource_id]


class NoOpLockProvider(LockProvider):
    """Lock provider that performs no locking.

    Safe for confirmation because the repository's compare-and-swap still
    picks a single winner. Use it when the storage enforces atomicity
    across processes (the SQL adapter) or in single-threaded tests.
    """

    @contextmanager
    def acquire(self, resource_id: str) -> Iterator[None]:  # noqa: ARG002
        yield
