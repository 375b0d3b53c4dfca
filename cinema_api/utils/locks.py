from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable


class KeyedLock:
    """One mutex per key, created on first use.

    Serializes read-then-write sections (seat allocation per showtime,
    overlap check per hall) between request threads of this process.
    Across processes the database constraints are what hold.

    A key's mutex is dropped once nobody holds or waits for it, so the
    table only grows with the number of keys in use at the same time.
    """

    def __init__(self):
        self._guard = Lock()
        self._locks: Dict[Hashable, Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks.setdefault(key, Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


hall_locks = KeyedLock()
showtime_locks = KeyedLock()
