"""Per-request mutual exclusion.

Each request id maps to its own lock, so actions on the same request are
serialized while actions on different requests run in parallel.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class RequestLockRegistry:
    """Hands out one lock per request id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, request_id: str) -> threading.Lock:
        """Get (or create) the lock guarding a request."""
        with self._guard:
            lock = self._locks.get(request_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[request_id] = lock
            return lock

    @contextmanager
    def hold(self, request_id: str) -> Iterator[None]:
        """Hold the request's lock for the duration of the block."""
        lock = self.lock_for(request_id)
        with lock:
            yield

    def discard(self, request_id: str) -> None:
        """Forget the lock of a request that will not be acted on again."""
        with self._guard:
            lock = self._locks.get(request_id)
            if lock is not None and not lock.locked():
                del self._locks[request_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every service instance in one process
default_registry = RequestLockRegistry()
