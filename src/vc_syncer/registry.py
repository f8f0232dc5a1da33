"""Registry of resource checkers run by the syncer."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from vc_patrol.objects import PassResult

from .drivers import ResourceChecker
from .events import PatrolRequest

LOG = logging.getLogger(__name__)


class CheckerRegistry:
    """Start and dispatch patrol requests to registered checkers."""

    def __init__(self) -> None:
        self._checkers: Dict[str, ResourceChecker] = {}

    def register(self, name: str, checker: ResourceChecker) -> None:
        if name in self._checkers:
            raise ValueError(f"checker '{name}' already registered")
        self._checkers[name] = checker

    def unregister(self, name: str) -> None:
        self._checkers.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self._checkers)

    def start_all(self) -> None:
        """Start every checker's patrol loop.

        A checker whose caches never sync raises; the error propagates since
        the syncer should not run half-started.
        """

        for name, checker in self._checkers.items():
            LOG.info("starting checker %s", name)
            checker.start_patrol()

    def join_all(self, timeout: Optional[float] = None) -> None:
        """Wait for every started checker to finish its in-flight pass."""

        for name, checker in self._checkers.items():
            LOG.debug("waiting for checker %s", name)
            checker.join(timeout)

    def handle(self, event: PatrolRequest) -> List[PassResult]:
        if not isinstance(event, PatrolRequest):
            raise TypeError(f"Unsupported event type: {type(event)!r}")
        if event.resource is None:
            return [checker.patroller_do() for checker in self._checkers.values()]
        checker = self._checkers.get(event.resource)
        if checker is None:
            raise KeyError(f"no checker registered for '{event.resource}'")
        return [checker.patroller_do()]
