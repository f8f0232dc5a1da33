"""Syncer-side integration for the consistency patroller.

Holds the checker contract, the registry that starts checkers and dispatches
on-demand passes, and the oslo.config options a syncer registers.
"""

from .events import PatrolRequest  # noqa: F401
from .registry import CheckerRegistry  # noqa: F401

__all__ = [
    "CheckerRegistry",
    "PatrolRequest",
]
