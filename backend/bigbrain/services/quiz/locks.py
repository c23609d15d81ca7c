import threading
from contextlib import contextmanager
from typing import Hashable


class KeyedLocks:
    """Mutual exclusion per key.

    Holders of different keys never block each other. Entries are dropped
    once no thread holds or waits on them, so the table stays proportional
    to in-flight operations rather than to every session ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, list] = {}  # key -> [lock, users]

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class _SharedEntry:
    __slots__ = ('cond', 'readers', 'writing', 'writers_waiting', 'users')

    def __init__(self) -> None:
        self.cond = threading.Condition(threading.Lock())
        self.readers = 0
        self.writing = False
        self.writers_waiting = 0
        self.users = 0


class KeyedSharedLocks:
    """Shared/exclusive lock per key.

    Any number of ``shared`` holders of one key run together. ``hold`` waits
    for them to drain and then excludes everyone else. A waiting ``hold``
    stops new shared holders from entering so it cannot be starved.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _SharedEntry] = {}

    def _checkout(self, key: Hashable) -> _SharedEntry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _SharedEntry()
            entry.users += 1
            return entry

    def _checkin(self, key: Hashable, entry: _SharedEntry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    @contextmanager
    def shared(self, key: Hashable):
        entry = self._checkout(key)
        try:
            with entry.cond:
                while entry.writing or entry.writers_waiting:
                    entry.cond.wait()
                entry.readers += 1
            try:
                yield
            finally:
                with entry.cond:
                    entry.readers -= 1
                    if entry.readers == 0:
                        entry.cond.notify_all()
        finally:
            self._checkin(key, entry)

    @contextmanager
    def hold(self, key: Hashable):
        entry = self._checkout(key)
        try:
            with entry.cond:
                entry.writers_waiting += 1
                while entry.writing or entry.readers:
                    entry.cond.wait()
                entry.writers_waiting -= 1
                entry.writing = True
            try:
                yield
            finally:
                with entry.cond:
                    entry.writing = False
                    entry.cond.notify_all()
        finally:
            self._checkin(key, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


# Process-wide tables. Lock order when nesting: session, then game, join or answer key.
# Session: start/advance/end hold it; submissions and joins share it.
session_locks = KeyedSharedLocks()
game_locks = KeyedLocks()  # game id: active pointer
join_locks = KeyedLocks()  # session id: name check and insert
answer_locks = KeyedLocks()  # (session id, player id, question id): ledger upserts
