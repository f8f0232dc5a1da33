"""Checker adapters exposed to the registry."""

from .base import ResourceChecker  # noqa: F401
from .patrol_adapter import PatrolCheckerAdapter, build_patrol_adapter  # noqa: F401

__all__ = [
    "PatrolCheckerAdapter",
    "ResourceChecker",
    "build_patrol_adapter",
]
