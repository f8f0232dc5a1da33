"""YAML configuration loader for the patrol agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import yaml

from vc_patrol.config import PatrolSettings
from vc_patrol.objects import DEFAULT_DELETION_POLICY, DeletionPolicy


@dataclass
class MetricsConfig:
    port: Optional[int] = None
    address: str = "0.0.0.0"


@dataclass
class SourceConfig:
    type: str
    path: Path
    options: dict = field(default_factory=dict)


@dataclass
class AgentConfig:
    checkers: Sequence[PatrolSettings]
    source: SourceConfig
    metrics: MetricsConfig = field(default_factory=MetricsConfig)


def _optional(value: Any, cast):
    return None if value is None else cast(value)


def _parse_checker(section: dict) -> PatrolSettings:
    if not isinstance(section, dict):
        raise ValueError("each patrol entry must be a mapping")
    policy = section.get("deletion_policy")
    return PatrolSettings(
        resource=str(section.get("resource", "storageclass")).lower(),
        period=float(section.get("period", 60.0)),
        cache_sync_timeout=_optional(section.get("cache_sync_timeout", 300.0), float),
        max_workers=_optional(section.get("max_workers"), int),
        deletion_policy=DeletionPolicy.parse(policy) if policy else DEFAULT_DELETION_POLICY,
    )


def _parse_checkers(section: Any) -> List[PatrolSettings]:
    entries: Iterable[dict]
    if section is None:
        entries = [{}]
    elif isinstance(section, dict):
        entries = [section]
    elif isinstance(section, list):
        entries = section
    else:
        raise ValueError("'patrol' section must be a mapping or a list")

    checkers = [_parse_checker(entry) for entry in entries]
    resources = [checker.resource for checker in checkers]
    if len(set(resources)) != len(resources):
        raise ValueError("each resource may only be patrolled once")
    return checkers


def _parse_source(section: Any) -> SourceConfig:
    if not isinstance(section, dict):
        raise ValueError("Configuration missing 'source' section")
    options = section.get("options", {})
    if not isinstance(options, dict):
        raise ValueError("source 'options' must be a mapping if provided")
    if "path" not in section:
        raise ValueError("source requires a 'path'")
    return SourceConfig(
        type=str(section.get("type", "file")),
        path=Path(section["path"]),
        options=options,
    )


def _parse_metrics(section: Any) -> MetricsConfig:
    if section is None:
        return MetricsConfig()
    if not isinstance(section, dict):
        raise ValueError("'metrics' section must be a mapping")
    return MetricsConfig(
        port=_optional(section.get("port"), int),
        address=str(section.get("address", "0.0.0.0")),
    )


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    return AgentConfig(
        checkers=_parse_checkers(data.get("patrol")),
        source=_parse_source(data.get("source")),
        metrics=_parse_metrics(data.get("metrics")),
    )
