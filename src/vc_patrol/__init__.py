"""Consistency patroller for objects shared between a super cluster and tenants.

The super cluster holds the authoritative copy of shared objects; each tenant
cluster holds a projected, possibly stale subset. The patroller periodically:

* scans every tenant cluster concurrently and deletes orphans (tenant objects
  with no super cluster counterpart);
* counts mismatched pairs and queues public ones for an upward sync;
* sweeps public super cluster objects and queues every tenant missing one; and
* publishes the mismatch count as a gauge.

Caches, clients and the upward queue are collaborators described in
:mod:`vc_patrol.ports`.
"""

from .config import PatrolSettings  # noqa: F401
from .patroller import PatrolDriver, Patroller  # noqa: F401

__all__ = ["PatrolDriver", "PatrolSettings", "Patroller"]
