"""Remedy primitives issued by the scanners and the super cluster sweep."""

from __future__ import annotations

import logging
from typing import Optional

from .objects import DEFAULT_DELETION_POLICY, DeletionPolicy, RemedyItem
from .ports import MetricsSink, TenantClusterRegistry, UpwardQueue

LOG = logging.getLogger(__name__)

REMEDY_COUNTER = "checker_remedy_stats"

DELETED_ORPHAN = "DeletedOrphanTenantObjects"
REQUEUED_SUPER = "RequeuedSuperMasterObjects"
REQUEUED_MISMATCH = "RequeuedMismatchedObjects"


class RemedyDispatcher:
    """Delete orphans in tenant clusters and enqueue upward syncs.

    Neither operation retries. Failed deletes are logged and reported back to
    the caller; the next pass will find the orphan again.
    """

    def __init__(
        self,
        clusters: TenantClusterRegistry,
        queue: UpwardQueue,
        metrics: Optional[MetricsSink] = None,
        deletion_policy: DeletionPolicy = DEFAULT_DELETION_POLICY,
    ) -> None:
        self._clusters = clusters
        self._queue = queue
        self._metrics = metrics
        self._deletion_policy = deletion_policy

    @property
    def deletion_policy(self) -> DeletionPolicy:
        return self._deletion_policy

    def delete_orphan(self, cluster: str, name: str) -> bool:
        try:
            client = self._clusters.get_client(cluster)
        except Exception as exc:
            LOG.error("error getting cluster %s client: %s", cluster, exc)
            return False

        try:
            client.delete(name, self._deletion_policy)
        except Exception as exc:
            LOG.error("error deleting %s in cluster %s: %s", name, cluster, exc)
            return False

        LOG.info(
            "deleted orphan %s in cluster %s (policy=%s)",
            name,
            cluster,
            self._deletion_policy.value,
        )
        self._count(DELETED_ORPHAN)
        return True

    def enqueue_upward_sync(self, cluster: str, name: str, reason: str = REQUEUED_MISMATCH) -> RemedyItem:
        item = RemedyItem(cluster=cluster, name=name, reason=reason)
        self._queue.add(item.key)
        LOG.debug("enqueued upward sync %s (%s)", item.key, reason)
        self._count(reason)
        return item

    def _count(self, label: str) -> None:
        if self._metrics is not None:
            self._metrics.inc_counter(REMEDY_COUNTER, label)
