"""Thread-safe mismatch counter shared by the tenant scanners of one pass."""

from __future__ import annotations

from threading import Lock


class DriftAggregator:
    """Count mismatches found during a pass.

    Scanners call :meth:`increment` concurrently. The driver owns the
    aggregator and only calls :meth:`snapshot` once every scanner is done.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._count = 0

    def reset(self) -> None:
        with self._lock:
            self._count = 0

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def snapshot(self) -> int:
        return self._count
