"""
Per-key mutual exclusion for threads of one process.

Usage:
    locks = KeyedLock()
    with locks.hold(sub_id):
        ...

Entries are dropped once no thread holds or waits for the key.
"""
from contextlib import contextmanager
from threading import Lock


class KeyedLock:
    def __init__(self):
        self._guard = Lock()
        self._entries: dict[str, list] = {}  # key -> [lock, holders + waiters]

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            entry = self._entries.setdefault(key, [Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
