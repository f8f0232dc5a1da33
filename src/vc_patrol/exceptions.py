"""Exceptions raised across the patroller ports."""

from __future__ import annotations


class PatrolError(Exception):
    """Base class for patroller errors."""


class NotFoundError(PatrolError):
    """The named object does not exist in the queried cache or cluster.

    This is the steady-state drift signal, not a failure.
    """

    def __init__(self, name: str, cluster: str | None = None) -> None:
        self.name = name
        self.cluster = cluster
        where = f" in cluster {cluster}" if cluster else ""
        super().__init__(f"{name!r} not found{where}")


class ClientUnavailableError(PatrolError):
    """No client could be obtained for a tenant cluster."""


class CacheSyncError(PatrolError):
    """Caches never became ready before the patrol loop was started."""
