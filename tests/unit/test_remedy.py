from fakes import FakeClusters, FakeQueue

from vc_patrol.exceptions import ClientUnavailableError
from vc_patrol.metrics import RecordingMetricsSink
from vc_patrol.objects import DeletionPolicy
from vc_patrol.remedy import DELETED_ORPHAN, REQUEUED_SUPER, RemedyDispatcher


def test_delete_orphan_uses_configured_policy():
    clusters = FakeClusters({"t1": []})
    metrics = RecordingMetricsSink()
    dispatcher = RemedyDispatcher(
        clusters, FakeQueue(), metrics=metrics, deletion_policy=DeletionPolicy.BACKGROUND
    )

    assert dispatcher.delete_orphan("t1", "orphan") is True
    assert clusters.deletes == [("t1", "orphan", DeletionPolicy.BACKGROUND)]
    assert metrics.counters[DELETED_ORPHAN] == 1


def test_default_policy_is_foreground():
    dispatcher = RemedyDispatcher(FakeClusters({}), FakeQueue())

    assert dispatcher.deletion_policy is DeletionPolicy.FOREGROUND


def test_delete_orphan_reports_client_failure():
    clusters = FakeClusters({"t1": []})
    clusters.client_errors["t1"] = ClientUnavailableError("no kubeconfig")
    metrics = RecordingMetricsSink()
    dispatcher = RemedyDispatcher(clusters, FakeQueue(), metrics=metrics)

    assert dispatcher.delete_orphan("t1", "orphan") is False
    assert clusters.deletes == []
    assert metrics.counters[DELETED_ORPHAN] == 0


def test_delete_orphan_reports_delete_failure():
    clusters = FakeClusters({"t1": []})
    clusters.delete_errors[("t1", "orphan")] = RuntimeError("forbidden")
    dispatcher = RemedyDispatcher(clusters, FakeQueue())

    assert dispatcher.delete_orphan("t1", "orphan") is False


def test_enqueue_upward_sync_uses_cluster_slash_name_key():
    queue = FakeQueue()
    metrics = RecordingMetricsSink()
    dispatcher = RemedyDispatcher(FakeClusters({}), queue, metrics=metrics)

    item = dispatcher.enqueue_upward_sync("t2", "gold", REQUEUED_SUPER)
    dispatcher.enqueue_upward_sync("t2", "gold", REQUEUED_SUPER)

    assert item.key == "t2/gold"
    assert queue.keys == ["t2/gold", "t2/gold"]
    assert metrics.counters[REQUEUED_SUPER] == 2
