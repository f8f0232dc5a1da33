"""Event primitives consumed by the checker registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PatrolRequest:
    """Ask for an immediate pass outside the periodic schedule.

    ``resource=None`` targets every registered checker.
    """

    resource: Optional[str] = None
