"""Object model shared by the patroller components.

Both the super cluster cache and the tenant caches hand out
:class:`ResourceObject` instances. The patroller never mutates them; remedies
are expressed as :class:`RemedyItem` keys or deletes against tenant clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

PUBLIC_LABEL_PREFIX = "tenancy.x-k8s.io/public."
TENANCY_PREFIX = "tenancy.x-k8s.io/"


class DeletionPolicy(Enum):
    """Propagation policy used when deleting an orphan in a tenant cluster."""

    FOREGROUND = "Foreground"
    BACKGROUND = "Background"
    ORPHAN = "Orphan"

    @classmethod
    def parse(cls, value: str) -> "DeletionPolicy":
        for policy in cls:
            if policy.value.lower() == str(value).lower():
                return policy
        raise ValueError(f"Unsupported deletion policy '{value}'")


DEFAULT_DELETION_POLICY = DeletionPolicy.FOREGROUND


def public_label(resource: str) -> str:
    return f"{PUBLIC_LABEL_PREFIX}{resource}"


@dataclass(frozen=True)
class ResourceObject:
    """A named object as seen in one cluster's cache.

    Attributes
    ----------
    name:
        Unique key within the resource type.
    labels / annotations:
        Object metadata. Visibility is carried as a label so it survives the
        downward projection into tenant clusters.
    spec:
        Opaque comparison payload. Which keys matter is decided by the
        equality strategy registered for the resource type.
    """

    name: str
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)
    spec: Mapping[str, Any] = field(default_factory=dict)

    def is_public(self, resource: str) -> bool:
        return self.labels.get(public_label(resource)) == "true"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResourceObject":
        metadata = data.get("metadata", {})
        name = metadata.get("name", data.get("name"))
        if not name:
            raise ValueError("object is missing a name")
        spec = {
            key: value
            for key, value in data.items()
            if key not in ("metadata", "name", "kind", "apiVersion")
        }
        return cls(
            name=str(name),
            labels=dict(metadata.get("labels") or {}),
            annotations=dict(metadata.get("annotations") or {}),
            spec=spec,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "metadata": {
                "name": self.name,
                "labels": dict(self.labels),
                "annotations": dict(self.annotations),
            }
        }
        data.update(self.spec)
        return data


@dataclass(frozen=True)
class RemedyItem:
    """Key placed on the upward queue for ``cluster``/``name``."""

    cluster: str
    name: str
    reason: str = ""

    @property
    def key(self) -> str:
        return f"{self.cluster}/{self.name}"


@dataclass
class PassResult:
    """Summary of what a single patrol pass observed and did."""

    resource: str
    clusters: List[str] = field(default_factory=list)
    drift: int = 0
    orphans_deleted: int = 0
    delete_failures: int = 0
    upward_syncs: List[RemedyItem] = field(default_factory=list)
    failed_clusters: List[str] = field(default_factory=list)
    duration: Optional[float] = None

    @property
    def skipped(self) -> bool:
        return not self.clusters
