"""JSON snapshot of a super cluster and its tenants.

Lets the patroller run end-to-end in the lab without real clusters. The file
looks like::

    {
      "super": {"storageclass": [{"metadata": {"name": "gold"}, ...}]},
      "tenants": {
        "tenant-a": {"storageclass": [...]},
        "tenant-b": {}
      }
    }

The snapshot is reloaded whenever the file changes. Orphan deletes remove the
object from the snapshot and write the file back.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from threading import Event, RLock
from typing import Any, Dict, List, Optional, Sequence

from vc_patrol.exceptions import ClientUnavailableError, NotFoundError
from vc_patrol.objects import DeletionPolicy, ResourceObject
from vc_patrol.ports import AuthoritativeCache, TenantClient, TenantClusterRegistry

LOG = logging.getLogger(__name__)


def _parse_objects(entries: Any) -> Dict[str, ResourceObject]:
    if entries is None:
        return {}
    if not isinstance(entries, list):
        raise ValueError("object lists must be JSON arrays")
    objects: Dict[str, ResourceObject] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("objects must be JSON objects")
        obj = ResourceObject.from_dict(entry)
        objects[obj.name] = obj
    return objects


class FileClusterState:
    """Load and persist the cluster snapshot stored at ``path``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = RLock()
        self._mtime: Optional[float] = None
        self._super: Dict[str, Dict[str, ResourceObject]] = {}
        self._tenants: Dict[str, Dict[str, Dict[str, ResourceObject]]] = {}

    @property
    def loaded(self) -> bool:
        return self._mtime is not None

    def refresh(self) -> bool:
        """Reload the snapshot if the file changed; return ``True`` if loaded."""

        with self._lock:
            if not self._path.exists():
                LOG.debug("cluster snapshot %s does not exist yet", self._path)
                return self.loaded
            mtime = self._path.stat().st_mtime
            if mtime == self._mtime:
                return True
            try:
                payload = json.loads(self._path.read_text())
                self._load(payload)
            except (json.JSONDecodeError, ValueError) as exc:
                LOG.warning("invalid cluster snapshot %s: %s", self._path, exc)
                return self.loaded
            self._mtime = mtime
            LOG.debug("loaded cluster snapshot %s", self._path)
            return True

    def _load(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            raise ValueError("snapshot must be a mapping")
        super_section = payload.get("super", {})
        tenants_section = payload.get("tenants", {})
        if not isinstance(super_section, dict) or not isinstance(tenants_section, dict):
            raise ValueError("'super' and 'tenants' must be mappings")

        authoritative = {
            resource.lower(): _parse_objects(entries)
            for resource, entries in super_section.items()
        }
        tenants: Dict[str, Dict[str, Dict[str, ResourceObject]]] = {}
        for cluster, resources in tenants_section.items():
            resources = resources or {}
            if not isinstance(resources, dict):
                raise ValueError(f"tenant '{cluster}' must map resources to lists")
            tenants[str(cluster)] = {
                resource.lower(): _parse_objects(entries)
                for resource, entries in resources.items()
            }
        self._super = authoritative
        self._tenants = tenants

    def _save(self) -> None:
        payload = {
            "super": {
                resource: [obj.to_dict() for obj in objects.values()]
                for resource, objects in self._super.items()
            },
            "tenants": {
                cluster: {
                    resource: [obj.to_dict() for obj in objects.values()]
                    for resource, objects in resources.items()
                }
                for cluster, resources in self._tenants.items()
            },
        }
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        self._mtime = self._path.stat().st_mtime

    def wait_until_loaded(self, stop_event: Event, timeout: Optional[float], interval: float = 0.5) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        while not stop_event.is_set():
            if self.refresh():
                return True
            if deadline is not None and time.monotonic() >= deadline:
                return False
            stop_event.wait(interval)
        return False

    # ------------------------------------------------------------------
    # Accessors used by the port implementations
    # ------------------------------------------------------------------
    def super_objects(self, resource: str) -> List[ResourceObject]:
        with self._lock:
            return list(self._super.get(resource, {}).values())

    def super_object(self, resource: str, name: str) -> ResourceObject:
        with self._lock:
            try:
                return self._super.get(resource, {})[name]
            except KeyError:
                raise NotFoundError(name) from None

    def cluster_names(self) -> List[str]:
        with self._lock:
            return sorted(self._tenants)

    def tenant_objects(self, cluster: str, resource: str) -> List[ResourceObject]:
        with self._lock:
            if cluster not in self._tenants:
                raise KeyError(f"unknown tenant cluster '{cluster}'")
            return list(self._tenants[cluster].get(resource, {}).values())

    def tenant_object(self, cluster: str, resource: str, name: str) -> ResourceObject:
        with self._lock:
            if cluster not in self._tenants:
                raise KeyError(f"unknown tenant cluster '{cluster}'")
            try:
                return self._tenants[cluster].get(resource, {})[name]
            except KeyError:
                raise NotFoundError(name, cluster) from None

    def delete_tenant_object(self, cluster: str, resource: str, name: str) -> None:
        with self._lock:
            objects = self._tenants.get(cluster, {}).get(resource, {})
            if name not in objects:
                raise NotFoundError(name, cluster)
            del objects[name]
            self._save()


class FileAuthoritativeCache(AuthoritativeCache):
    def __init__(self, state: FileClusterState, resource: str) -> None:
        self._state = state
        self._resource = resource

    def list(self) -> Sequence[ResourceObject]:
        return self._state.super_objects(self._resource)

    def get(self, name: str) -> ResourceObject:
        return self._state.super_object(self._resource, name)

    def wait_for_cache_sync(self, stop_event: Event, timeout: Optional[float] = None) -> bool:
        return self._state.wait_until_loaded(stop_event, timeout)


class FileTenantClient(TenantClient):
    def __init__(self, state: FileClusterState, cluster: str, resource: str) -> None:
        self._state = state
        self._cluster = cluster
        self._resource = resource

    def delete(self, name: str, policy: DeletionPolicy) -> None:
        LOG.debug(
            "deleting %s %s from snapshot cluster %s (policy=%s)",
            self._resource,
            name,
            self._cluster,
            policy.value,
        )
        self._state.delete_tenant_object(self._cluster, self._resource, name)


class FileTenantRegistry(TenantClusterRegistry):
    def __init__(self, state: FileClusterState, resource: str) -> None:
        self._state = state
        self._resource = resource

    def list_clusters(self) -> Sequence[str]:
        self._state.refresh()
        return self._state.cluster_names()

    def list_objects(self, cluster: str) -> Sequence[ResourceObject]:
        return self._state.tenant_objects(cluster, self._resource)

    def get_client(self, cluster: str) -> TenantClient:
        if cluster not in self._state.cluster_names():
            raise ClientUnavailableError(f"no client for cluster '{cluster}'")
        return FileTenantClient(self._state, cluster, self._resource)

    def probe(self, cluster: str, name: str) -> ResourceObject:
        return self._state.tenant_object(cluster, self._resource, name)
