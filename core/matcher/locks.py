"""Keyed in-process locks serializing candidate-set writers per subject."""

import contextlib
import threading
from typing import Any, Dict, Iterator, List


class SubjectLockRegistry:
    """
    One lock per subject id, created on demand and dropped when unused.

    `hold()` acquires several keys in ascending order so two callers
    locking the same pair cannot deadlock.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Any, List[Any]] = {}  # key -> [lock, refcount]

    def _checkout(self, key: Any) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: Any) -> None:
        with self._guard:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextlib.contextmanager
    def hold(self, *keys: Any) -> Iterator[None]:
        ordered = sorted(set(keys))
        acquired = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    lock.acquire()
                except BaseException:
                    self._checkin(key)
                    raise
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every CandidateSetManager in the process
subject_locks = SubjectLockRegistry()
