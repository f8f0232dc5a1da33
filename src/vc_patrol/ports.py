"""Abstract interfaces for the collaborators the patroller talks to.

The informer caches, the per-cluster client pool and the upward work queue
live outside this package. Implementations only need to satisfy these
contracts; the lab runtime in :mod:`patrol_agent.sources` is one example.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Event
from typing import List, Optional, Sequence

from .objects import DeletionPolicy, ResourceObject


class AuthoritativeCache(ABC):
    """Read-only view of the super cluster cache for one resource type."""

    @abstractmethod
    def list(self) -> Sequence[ResourceObject]:
        """Return every cached object."""

    @abstractmethod
    def get(self, name: str) -> ResourceObject:
        """Return ``name`` or raise :class:`~vc_patrol.exceptions.NotFoundError`."""

    def list_public(self, resource: str) -> List[ResourceObject]:
        return [obj for obj in self.list() if obj.is_public(resource)]

    def wait_for_cache_sync(self, stop_event: Event, timeout: Optional[float] = None) -> bool:
        """Block until the cache is warm; ``False`` if it never gets there."""

        return True


class TenantClient(ABC):
    """Write access to a single tenant cluster."""

    @abstractmethod
    def delete(self, name: str, policy: DeletionPolicy) -> None:
        """Delete ``name`` using ``policy`` for dependents."""


class TenantClusterRegistry(ABC):
    """Cache and client access for the set of known tenant clusters."""

    @abstractmethod
    def list_clusters(self) -> Sequence[str]:
        """Return the names of the tenant clusters known right now."""

    @abstractmethod
    def list_objects(self, cluster: str) -> Sequence[ResourceObject]:
        """Return the objects cached for ``cluster``."""

    @abstractmethod
    def get_client(self, cluster: str) -> TenantClient:
        """Return a client for ``cluster``."""

    @abstractmethod
    def probe(self, cluster: str, name: str) -> ResourceObject:
        """Return ``name`` from ``cluster`` or raise ``NotFoundError``."""


class UpwardQueue(ABC):
    """Queue consumed by the tenant-to-super upward controller."""

    @abstractmethod
    def add(self, key: str) -> None:
        """Enqueue ``key``; duplicates are allowed."""


class MetricsSink(ABC):
    @abstractmethod
    def set_gauge(self, name: str, value: float) -> None:
        """Set the mismatch gauge identified by ``name``."""

    @abstractmethod
    def inc_counter(self, name: str, label: str) -> None:
        """Increment counter ``name`` for ``label``."""

    def observe_duration(self, resource: str, seconds: float) -> None:
        """Record how long a pass over ``resource`` took."""
