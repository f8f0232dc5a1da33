"""Equality checks between super cluster objects and their tenant copies.

A strategy takes ``(authoritative, tenant)`` and returns ``None`` when the
tenant copy is in sync, or the object the tenant copy should become. The
evaluator is pure: it never performs I/O and never mutates its inputs.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .objects import TENANCY_PREFIX, ResourceObject

Strategy = Callable[[ResourceObject, ResourceObject], Optional[ResourceObject]]

_MISSING = object()

STORAGECLASS_FIELDS = (
    "provisioner",
    "parameters",
    "reclaimPolicy",
    "mountOptions",
    "allowVolumeExpansion",
    "volumeBindingMode",
    "allowedTopologies",
)

PRIORITYCLASS_FIELDS = (
    "value",
    "globalDefault",
    "description",
    "preemptionPolicy",
)


def _merge_downward(
    source: Mapping[str, str], target: Mapping[str, str]
) -> Optional[Dict[str, str]]:
    """Overlay ``source`` onto ``target``, skipping tenancy-internal keys.

    Returns the merged mapping when ``target`` is missing or disagrees on any
    key, otherwise ``None``.
    """

    merged = dict(target)
    changed = False
    for key, value in source.items():
        if key.startswith(TENANCY_PREFIX):
            continue
        if merged.get(key) != value:
            merged[key] = value
            changed = True
    return merged if changed else None


def check_downward_meta(
    authoritative: ResourceObject, tenant: ResourceObject
) -> Optional[Tuple[Dict[str, str], Dict[str, str]]]:
    labels = _merge_downward(authoritative.labels, tenant.labels)
    annotations = _merge_downward(authoritative.annotations, tenant.annotations)
    if labels is None and annotations is None:
        return None
    return (
        labels if labels is not None else dict(tenant.labels),
        annotations if annotations is not None else dict(tenant.annotations),
    )


def _diff_spec(
    authoritative: Mapping[str, Any],
    tenant: Mapping[str, Any],
    fields: Iterable[str],
) -> Optional[Dict[str, Any]]:
    updated = dict(tenant)
    changed = False
    for name in fields:
        wanted = authoritative.get(name, _MISSING)
        if tenant.get(name, _MISSING) == wanted:
            continue
        changed = True
        if wanted is _MISSING:
            updated.pop(name, None)
        else:
            updated[name] = wanted
    return updated if changed else None


def field_strategy(fields: Optional[Iterable[str]] = None) -> Strategy:
    """Build a strategy comparing downward metadata plus ``fields`` of the spec.

    With ``fields=None`` every key present on either side is compared.
    """

    fixed = tuple(fields) if fields is not None else None

    def compare(
        authoritative: ResourceObject, tenant: ResourceObject
    ) -> Optional[ResourceObject]:
        meta = check_downward_meta(authoritative, tenant)
        keys = fixed
        if keys is None:
            keys = tuple(dict.fromkeys([*authoritative.spec, *tenant.spec]))
        spec = _diff_spec(authoritative.spec, tenant.spec, keys)
        if meta is None and spec is None:
            return None
        labels, annotations = meta or (dict(tenant.labels), dict(tenant.annotations))
        return ResourceObject(
            name=tenant.name,
            labels=labels,
            annotations=annotations,
            spec=spec if spec is not None else dict(tenant.spec),
        )

    return compare


_STRATEGIES: Dict[str, Strategy] = {
    "storageclass": field_strategy(STORAGECLASS_FIELDS),
    "priorityclass": field_strategy(PRIORITYCLASS_FIELDS),
}


def register_strategy(resource: str, strategy: Strategy) -> None:
    _STRATEGIES[resource.lower()] = strategy


def get_strategy(resource: str) -> Strategy:
    return _STRATEGIES.get(resource.lower(), field_strategy())


class EqualityEvaluator:
    """Compare objects of one resource type using its registered strategy."""

    def __init__(self, resource: str, strategy: Optional[Strategy] = None) -> None:
        self._strategy = strategy or get_strategy(resource)

    def compare(
        self, authoritative: ResourceObject, tenant: ResourceObject
    ) -> Optional[ResourceObject]:
        return self._strategy(authoritative, tenant)
