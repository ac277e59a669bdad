"""Concurrency-safe record of upstream endpoints touched."""
import threading
from typing import Iterable, Optional


class EndpointTracker:
    """
    Set of endpoint identifiers shared by concurrent enrichers.

    A tracker may have a parent; every add is forwarded to it so a batch-level
    tracker sees the union of all per-order trackers.
    """

    def __init__(self, parent: Optional["EndpointTracker"] = None):
        self._endpoints: set[str] = set()
        self._lock = threading.Lock()
        self._parent = parent

    def add(self, endpoint: str) -> None:
        with self._lock:
            self._endpoints.add(endpoint)
        if self._parent is not None:
            self._parent.add(endpoint)

    def update(self, endpoints: Iterable[str]) -> None:
        for endpoint in endpoints:
            self.add(endpoint)

    def child(self) -> "EndpointTracker":
        """New tracker whose adds also land here."""
        return EndpointTracker(parent=self)

    def snapshot(self) -> list[str]:
        """Sorted copy of the endpoints seen so far."""
        with self._lock:
            return sorted(self._endpoints)

    def __contains__(self, endpoint: object) -> bool:
        with self._lock:
            return endpoint in self._endpoints

    def __len__(self) -> int:
        with self._lock:
            return len(self._endpoints)
