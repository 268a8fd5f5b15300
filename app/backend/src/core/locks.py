"""In-process per-owner locks."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class OwnerLocks:
    """One lock per owner key.

    Operations for the same owner run one at a time; different owners never
    contend. Row locks taken in the database cover other processes.

    Entries are kept for the life of the process, one per owner email, so
    the registry grows with the number of accounts and no further.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key.lower())
        with lock:
            yield


__all__ = ["OwnerLocks"]
