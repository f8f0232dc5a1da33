"""Per-tenant consistency scan."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .drift import DriftAggregator
from .equality import EqualityEvaluator
from .exceptions import NotFoundError
from .objects import RemedyItem
from .ports import AuthoritativeCache, TenantClusterRegistry
from .remedy import REQUEUED_MISMATCH, RemedyDispatcher

LOG = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of scanning one tenant cluster."""

    cluster: str
    listed: bool = True
    orphans_deleted: int = 0
    delete_failures: int = 0
    mismatches: int = 0
    upward_syncs: List[RemedyItem] = field(default_factory=list)


class TenantScanner:
    """Compare one tenant's cached objects against the super cluster cache.

    Tenant objects without a super cluster counterpart are orphans and get
    deleted; the super cluster is the source of truth for existence. Objects
    present on both sides are handed to the equality evaluator, and a public
    mismatch is queued for an upward sync. Private mismatches are only
    counted and logged.
    """

    def __init__(
        self,
        resource: str,
        authoritative: AuthoritativeCache,
        clusters: TenantClusterRegistry,
        evaluator: EqualityEvaluator,
        dispatcher: RemedyDispatcher,
    ) -> None:
        self._resource = resource
        self._authoritative = authoritative
        self._clusters = clusters
        self._evaluator = evaluator
        self._dispatcher = dispatcher

    def scan(self, cluster: str, drift: DriftAggregator) -> ScanResult:
        """Scan ``cluster``, counting mismatches on the pass-owned ``drift``."""

        result = ScanResult(cluster=cluster)
        try:
            tenant_objects = self._clusters.list_objects(cluster)
        except Exception as exc:
            LOG.error(
                "error listing %s from cluster %s informer cache: %s",
                self._resource,
                cluster,
                exc,
            )
            result.listed = False
            return result

        LOG.debug("check %s consistency in cluster %s", self._resource, cluster)

        for tenant_obj in tenant_objects:
            try:
                authoritative = self._authoritative.get(tenant_obj.name)
            except NotFoundError:
                if self._dispatcher.delete_orphan(cluster, tenant_obj.name):
                    result.orphans_deleted += 1
                else:
                    result.delete_failures += 1
                continue
            except Exception as exc:
                LOG.error(
                    "failed to get %s %s from super cluster cache: %s",
                    self._resource,
                    tenant_obj.name,
                    exc,
                )
                continue

            try:
                updated = self._evaluator.compare(authoritative, tenant_obj)
            except Exception as exc:
                LOG.error(
                    "failed to compare %s %s in cluster %s: %s",
                    self._resource,
                    tenant_obj.name,
                    cluster,
                    exc,
                )
                continue
            if updated is None:
                continue

            drift.increment()
            result.mismatches += 1
            LOG.warning(
                "spec of %s %s diff in super and tenant cluster %s",
                self._resource,
                tenant_obj.name,
                cluster,
            )
            if authoritative.is_public(self._resource):
                result.upward_syncs.append(
                    self._dispatcher.enqueue_upward_sync(
                        cluster, tenant_obj.name, REQUEUED_MISMATCH
                    )
                )
            else:
                LOG.info(
                    "%s %s is private, not requeueing mismatch in cluster %s",
                    self._resource,
                    tenant_obj.name,
                    cluster,
                )

        return result
