"""Patrol driver and periodic loop.

One pass fans out a :class:`~vc_patrol.scanner.TenantScanner` per tenant
cluster, waits for all of them, then sweeps the public super cluster objects
looking for tenants that are missing them. A failure in one tenant never
cancels the others and nothing raised inside a pass escapes it.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from threading import Event, Thread
from typing import Iterable, List, Optional

from .config import PatrolSettings
from .drift import DriftAggregator
from .equality import EqualityEvaluator
from .exceptions import CacheSyncError, NotFoundError
from .objects import PassResult, RemedyItem
from .ports import AuthoritativeCache, MetricsSink, TenantClusterRegistry, UpwardQueue
from .remedy import REQUEUED_SUPER, RemedyDispatcher
from .scanner import ScanResult, TenantScanner

LOG = logging.getLogger(__name__)


class PatrolDriver:
    """Run consistency passes for one resource type."""

    def __init__(
        self,
        settings: PatrolSettings,
        authoritative: AuthoritativeCache,
        clusters: TenantClusterRegistry,
        queue: UpwardQueue,
        metrics: Optional[MetricsSink] = None,
        evaluator: Optional[EqualityEvaluator] = None,
    ) -> None:
        self._settings = settings
        self._authoritative = authoritative
        self._clusters = clusters
        self._metrics = metrics
        self._dispatcher = RemedyDispatcher(
            clusters,
            queue,
            metrics=metrics,
            deletion_policy=settings.deletion_policy,
        )
        self._scanner = TenantScanner(
            settings.resource,
            authoritative,
            clusters,
            evaluator or EqualityEvaluator(settings.resource),
            self._dispatcher,
        )

    @property
    def settings(self) -> PatrolSettings:
        return self._settings

    @property
    def authoritative(self) -> AuthoritativeCache:
        return self._authoritative

    def patrol(self) -> PassResult:
        """Run a pass over whatever tenant clusters are known right now."""

        try:
            cluster_names = self._clusters.list_clusters()
        except Exception as exc:
            LOG.error("error listing tenant clusters: %s", exc)
            cluster_names = []
        return self.run_pass(cluster_names)

    def run_pass(self, cluster_names: Iterable[str]) -> PassResult:
        """Run one pass over ``cluster_names``.

        Each pass counts mismatches on its own :class:`DriftAggregator`, so
        overlapping passes never see each other's counts. With no clusters
        the pass is a no-op: nothing is scanned and no gauge is published,
        so the gauge keeps the value of the last pass that ran.
        """

        resource = self._settings.resource
        clusters = list(dict.fromkeys(cluster_names))
        result = PassResult(resource=resource)
        if not clusters:
            LOG.info(
                "super cluster has no tenant control planes, giving up periodic checker: %s",
                resource,
            )
            return result

        started = time.monotonic()
        result.clusters = clusters
        drift = DriftAggregator()

        for scan in self._scan_all(clusters, drift):
            if not scan.listed:
                result.failed_clusters.append(scan.cluster)
            result.orphans_deleted += scan.orphans_deleted
            result.delete_failures += scan.delete_failures
            result.upward_syncs.extend(scan.upward_syncs)

        result.upward_syncs.extend(self._sweep_public(clusters))

        result.drift = drift.snapshot()
        result.duration = time.monotonic() - started
        if self._metrics is not None:
            self._metrics.set_gauge(self._settings.mismatch_gauge, float(result.drift))
            self._metrics.observe_duration(resource, result.duration)

        LOG.info(
            "%s patrol finished: clusters=%d drift=%d deleted=%d requeued=%d",
            resource,
            len(clusters),
            result.drift,
            result.orphans_deleted,
            len(result.upward_syncs),
        )
        return result

    def _scan_all(self, clusters: List[str], drift: DriftAggregator) -> List[ScanResult]:
        workers = self._settings.max_workers or len(clusters)
        results: List[ScanResult] = []
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"patrol-{self._settings.resource}"
        ) as pool:
            futures = {pool.submit(self._scanner.scan, name, drift): name for name in clusters}
            wait(futures)

        for future, cluster in futures.items():
            exc = future.exception()
            if exc is not None:
                LOG.error(
                    "scan of cluster %s failed: %s",
                    cluster,
                    exc,
                    exc_info=(type(exc), exc, exc.__traceback__),
                )
                results.append(ScanResult(cluster=cluster, listed=False))
                continue
            results.append(future.result())
        return results

    def _sweep_public(self, clusters: List[str]) -> List[RemedyItem]:
        resource = self._settings.resource
        try:
            public = self._authoritative.list_public(resource)
        except Exception as exc:
            LOG.error("error listing %s from super cluster informer cache: %s", resource, exc)
            return []

        requeued: List[RemedyItem] = []
        for obj in public:
            for cluster in clusters:
                try:
                    self._clusters.probe(cluster, obj.name)
                except NotFoundError:
                    LOG.info(
                        "public %s %s missing in cluster %s, requeueing",
                        resource,
                        obj.name,
                        cluster,
                    )
                    requeued.append(
                        self._dispatcher.enqueue_upward_sync(cluster, obj.name, REQUEUED_SUPER)
                    )
                except Exception as exc:
                    LOG.error(
                        "fail to get %s %s from cluster %s: %s",
                        resource,
                        obj.name,
                        cluster,
                        exc,
                    )
        return requeued


class Patroller(Thread):
    """Invoke :meth:`PatrolDriver.patrol` every ``period`` seconds.

    The loop stops once ``stop_event`` is set. A pass already running is
    allowed to finish.
    """

    def __init__(self, driver: PatrolDriver, stop_event: Event) -> None:
        super().__init__(daemon=True, name=f"patroller-{driver.settings.resource}")
        self._driver = driver
        self._stop_event = stop_event
        self.last_result: Optional[PassResult] = None

    @property
    def driver(self) -> PatrolDriver:
        return self._driver

    def start_patrol(self) -> None:
        """Wait for warm caches, then start the periodic loop.

        Raises :class:`CacheSyncError` if the caches never sync.
        """

        settings = self._driver.settings
        if not self._driver.authoritative.wait_for_cache_sync(
            self._stop_event, settings.cache_sync_timeout
        ):
            raise CacheSyncError(
                f"failed to wait for caches to sync before starting {settings.resource} checker"
            )
        LOG.info("starting %s patroller (period=%ss)", settings.resource, settings.period)
        self.start()

    def run(self) -> None:
        while not self._stop_event.is_set():
            self.patrol_once()
            self._stop_event.wait(self._driver.settings.period)
        LOG.info("%s patroller stopped", self._driver.settings.resource)

    def patrol_once(self) -> Optional[PassResult]:
        try:
            self.last_result = self._driver.patrol()
        except Exception:  # pragma: no cover
            LOG.exception("%s patrol pass failed", self._driver.settings.resource)
            return None
        return self.last_result
