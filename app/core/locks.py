# app/core/locks.py
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from typing import ContextManager


class KeyedLocks:
    """
    In-process mutual exclusion per key (here: per user id).

    Only serializes callers inside one process. Multiple service
    instances sharing a database still race.

    Locks are held weakly: once no caller holds or waits on a key's
    lock, its entry drops out of the table.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield


def no_lock(key: str) -> ContextManager[None]:
    """Stand-in for KeyedLocks.hold when serialization is disabled."""
    return nullcontext()
