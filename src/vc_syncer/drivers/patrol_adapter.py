"""Adapter between the patroller and the registry contract."""

from __future__ import annotations

from typing import Optional

from vc_patrol.objects import PassResult
from vc_patrol.patroller import Patroller

from .base import ResourceChecker


class PatrolCheckerAdapter(ResourceChecker):
    """Wrap :class:`~vc_patrol.patroller.Patroller` for registry use."""

    def __init__(self, patroller: Patroller) -> None:
        self._patroller = patroller

    @property
    def patroller(self) -> Patroller:
        return self._patroller

    def start_patrol(self) -> None:
        self._patroller.start_patrol()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._patroller.ident is not None:
            self._patroller.join(timeout)

    def patroller_do(self) -> PassResult:
        result = self._patroller.patrol_once()
        if result is None:
            return PassResult(resource=self._patroller.driver.settings.resource)
        return result


def build_patrol_adapter(patroller: Patroller) -> PatrolCheckerAdapter:
    """Helper mirroring the builder pattern used by the syncer."""

    return PatrolCheckerAdapter(patroller)
