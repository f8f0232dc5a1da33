"""Entry point for the standalone patrol agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event

from prometheus_client import start_http_server

from vc_patrol.exceptions import CacheSyncError
from vc_patrol.metrics import PrometheusMetricsSink
from vc_patrol.patroller import PatrolDriver, Patroller
from vc_syncer import CheckerRegistry, PatrolRequest
from vc_syncer.drivers import build_patrol_adapter

from .config import AgentConfig, load_config
from .sources import FileAuthoritativeCache, FileClusterState, FileTenantRegistry, LoggingUpwardQueue

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_registry(config: AgentConfig, stop_event: Event) -> CheckerRegistry:
    if config.source.type != "file":
        raise ValueError(f"unsupported source type '{config.source.type}'")

    state = FileClusterState(config.source.path)
    queue = LoggingUpwardQueue()
    metrics = PrometheusMetricsSink()

    registry = CheckerRegistry()
    for settings in config.checkers:
        driver = PatrolDriver(
            settings,
            FileAuthoritativeCache(state, settings.resource),
            FileTenantRegistry(state, settings.resource),
            queue,
            metrics=metrics,
        )
        registry.register(settings.resource, build_patrol_adapter(Patroller(driver, stop_event)))
    return registry


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the tenant consistency patroller")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/vc-patrol/patrol.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass for every checker and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)
    stop_event = Event()
    registry = build_registry(config, stop_event)

    if args.once:
        for result in registry.handle(PatrolRequest()):
            LOG.info(
                "%s: drift=%d deleted=%d requeued=%d failed_clusters=%s",
                result.resource,
                result.drift,
                result.orphans_deleted,
                len(result.upward_syncs),
                result.failed_clusters,
            )
        return 0

    if config.metrics.port is not None:
        start_http_server(config.metrics.port, addr=config.metrics.address)
        LOG.info("serving metrics on %s:%d", config.metrics.address, config.metrics.port)

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        registry.start_all()
    except CacheSyncError as exc:
        LOG.error("%s", exc)
        stop_event.set()
        registry.join_all()
        return 1

    try:
        while not stop_event.is_set():
            stop_event.wait(1.0)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    registry.join_all()
    LOG.info("patrol agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
