from pathlib import Path

import pytest

from patrol_agent.config import load_config
from vc_patrol.objects import DeletionPolicy


def test_load_config(tmp_path: Path):
    config_path = tmp_path / "patrol.yaml"
    config_path.write_text(
        """
patrol:
  - resource: StorageClass
    period: 30
    cache_sync_timeout: 10
    max_workers: 4
    deletion_policy: background
  - resource: priorityclass
metrics:
  port: 9102
source:
  type: file
  path: /etc/vc-patrol/clusters.json
"""
    )

    cfg = load_config(config_path)

    assert len(cfg.checkers) == 2
    sc_checker = cfg.checkers[0]
    assert sc_checker.resource == "storageclass"
    assert sc_checker.period == pytest.approx(30.0)
    assert sc_checker.cache_sync_timeout == pytest.approx(10.0)
    assert sc_checker.max_workers == 4
    assert sc_checker.deletion_policy is DeletionPolicy.BACKGROUND

    pc_checker = cfg.checkers[1]
    assert pc_checker.period == pytest.approx(60.0)
    assert pc_checker.max_workers is None
    assert pc_checker.deletion_policy is DeletionPolicy.FOREGROUND

    assert cfg.metrics.port == 9102
    assert cfg.source.type == "file"
    assert cfg.source.path == Path("/etc/vc-patrol/clusters.json")


def test_single_patrol_mapping_and_defaults(tmp_path: Path):
    config_path = tmp_path / "patrol.yaml"
    config_path.write_text("source:\n  path: clusters.json\n")

    cfg = load_config(config_path)

    assert [c.resource for c in cfg.checkers] == ["storageclass"]
    assert cfg.metrics.port is None


@pytest.mark.parametrize(
    "body",
    [
        "- just\n- a list\n",
        "patrol: {}\n",
        "patrol: 3\nsource: {path: x}\n",
        "patrol: {deletion_policy: sideways}\nsource: {path: x}\n",
        "patrol: [{resource: a}, {resource: a}]\nsource: {path: x}\n",
        "source: {type: file}\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, body):
    config_path = tmp_path / "patrol.yaml"
    config_path.write_text(body)

    with pytest.raises(ValueError):
        load_config(config_path)
