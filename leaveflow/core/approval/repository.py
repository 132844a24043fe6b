"""Storage interface for approval requests.

The engine never touches storage; ``ApprovalService`` talks to one of these.
``save`` must refuse a snapshot whose ``version`` no longer matches the
stored one, and bump the version on success.
"""

import copy
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import ConcurrentModification, RequestNotFound
from .models import ApprovalRequest


class ApprovalRepository(ABC):
    """Abstract store of ``ApprovalRequest`` aggregates."""

    @abstractmethod
    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        """Store a new request with all its nodes, atomically.

        Returns:
            The stored snapshot (version 1)
        """

    @abstractmethod
    def get(self, request_id: str, *, for_update: bool = False) -> Optional[ApprovalRequest]:
        """Load a request snapshot, or None if the id is unknown."""

    @abstractmethod
    def save(self, request: ApprovalRequest) -> ApprovalRequest:
        """Persist an updated snapshot.

        Raises:
            RequestNotFound: If the request was never added
            ConcurrentModification: If the stored version moved on
        """

    @abstractmethod
    def list(self) -> List[ApprovalRequest]:
        """All requests, newest first."""

    def rollback(self) -> None:
        """Abandon a load made with ``for_update=True`` that will not be saved.

        Releases whatever the store holds for that load (row locks, an
        open transaction). Nothing to do for stores that hold nothing.
        """


class InMemoryApprovalRepository(ApprovalRepository):
    """Dictionary-backed repository, used in tests and single-process setups.

    Snapshots are deep-copied in and out so callers never share state with
    the store.
    """

    def __init__(self) -> None:
        self._items: Dict[str, ApprovalRequest] = {}
        self._guard = threading.Lock()

    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        with self._guard:
            if request.id in self._items:
                raise ValueError(f"Request {request.id} already exists")
            stored = copy.deepcopy(request)
            stored.version = 1
            self._items[stored.id] = stored
            return copy.deepcopy(stored)

    def get(self, request_id: str, *, for_update: bool = False) -> Optional[ApprovalRequest]:
        with self._guard:
            stored = self._items.get(request_id)
            return copy.deepcopy(stored) if stored else None

    def save(self, request: ApprovalRequest) -> ApprovalRequest:
        with self._guard:
            stored = self._items.get(request.id)
            if stored is None:
                raise RequestNotFound(request.id)
            if stored.version != request.version:
                raise ConcurrentModification(request.id, request.version, stored.version)

            updated = copy.deepcopy(request)
            updated.version = stored.version + 1
            self._items[updated.id] = updated
            return copy.deepcopy(updated)

    def list(self) -> List[ApprovalRequest]:
        with self._guard:
            items = sorted(self._items.values(), key=lambda r: r.created_at, reverse=True)
            return [copy.deepcopy(r) for r in items]
