"""Keyed in-process locks.

Cart mutations are serialised per owner and quote transitions per quote.
Each key maps to its own ``threading.Lock`` for as long as some thread holds
or waits on it; the last thread out drops the entry, so the registry only
ever contains keys that are in use. The registry itself is guarded so two
threads asking for the same key always share one lock.
"""

import threading
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    def __init__(self):
        self._locks: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
            return entry.lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._locks[key]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: str):
        """Acquire the locks for `keys` in sorted order, release in reverse."""
        ordered = sorted(set(k for k in keys if k))
        locks = [self._checkout(key) for key in ordered]
        acquired = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for key in ordered:
                self._checkin(key)


cart_locks = KeyedLocks()
quote_locks = KeyedLocks()
