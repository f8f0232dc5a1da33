"""Settings shared by the patroller, its YAML loader and the oslo options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .objects import DEFAULT_DELETION_POLICY, DeletionPolicy


@dataclass(frozen=True)
class PatrolSettings:
    """Knobs for one resource checker.

    Attributes
    ----------
    resource:
        Lower-case resource type, e.g. ``storageclass``. Selects the equality
        strategy and the public visibility label.
    period:
        Seconds between the start of two passes.
    cache_sync_timeout:
        How long to wait for warm caches before giving up. ``None`` waits
        until the stop signal fires.
    max_workers:
        Upper bound on concurrent tenant scans. ``None`` scans every tenant
        at once.
    deletion_policy:
        Propagation policy for orphan deletes.
    """

    resource: str = "storageclass"
    period: float = 60.0
    cache_sync_timeout: Optional[float] = 300.0
    max_workers: Optional[int] = None
    deletion_policy: DeletionPolicy = DEFAULT_DELETION_POLICY

    def __post_init__(self) -> None:
        if not self.resource:
            raise ValueError("resource must not be empty")
        if self.period <= 0:
            raise ValueError("period must be positive")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @property
    def mismatch_gauge(self) -> str:
        """Gauge label, e.g. ``MissMatchedStorageclasses``."""

        suffix = "es" if self.resource.endswith("s") else "s"
        return f"MissMatched{self.resource.capitalize()}{suffix}"
