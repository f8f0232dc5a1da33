"""Abstract interfaces for resource checkers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from vc_patrol.objects import PassResult


class ResourceChecker(ABC):
    """Base class for checkers managed by :class:`CheckerRegistry`."""

    @abstractmethod
    def start_patrol(self) -> None:
        """Wait for caches and start periodic patrols."""

    @abstractmethod
    def patroller_do(self) -> PassResult:
        """Run one consistency pass now."""

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for a running patrol loop to finish its current pass."""
