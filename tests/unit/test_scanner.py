import logging

from fakes import FakeAuthoritative, FakeClusters, FakeQueue, sc

from vc_patrol.drift import DriftAggregator
from vc_patrol.equality import EqualityEvaluator
from vc_patrol.exceptions import ClientUnavailableError
from vc_patrol.remedy import RemedyDispatcher
from vc_patrol.scanner import TenantScanner


def build_scanner(authoritative, clusters, queue=None):
    drift = DriftAggregator()
    dispatcher = RemedyDispatcher(clusters, queue or FakeQueue())
    scanner = TenantScanner(
        "storageclass",
        authoritative,
        clusters,
        EqualityEvaluator("storageclass"),
        dispatcher,
    )
    return scanner, drift


def test_orphan_is_deleted():
    clusters = FakeClusters({"t1": [sc("orphan")]})
    scanner, drift = build_scanner(FakeAuthoritative(), clusters)

    result = scanner.scan("t1", drift)

    assert clusters.deleted() == [("t1", "orphan")]
    assert result.orphans_deleted == 1
    assert drift.snapshot() == 0


def test_list_failure_skips_cluster():
    clusters = FakeClusters({"t1": [sc("orphan")]})
    clusters.list_errors["t1"] = RuntimeError("cache not ready")
    scanner, drift = build_scanner(FakeAuthoritative(), clusters)

    result = scanner.scan("t1", drift)

    assert result.listed is False
    assert clusters.deletes == []


def test_client_failure_continues_with_next_object():
    clusters = FakeClusters({"t1": [sc("a"), sc("b")]})
    clusters.client_errors["t1"] = ClientUnavailableError("down")
    scanner, drift = build_scanner(FakeAuthoritative(), clusters)

    result = scanner.scan("t1", drift)

    assert result.delete_failures == 2
    assert result.orphans_deleted == 0


def test_delete_failure_continues_with_next_object():
    clusters = FakeClusters({"t1": [sc("a"), sc("b")]})
    clusters.delete_errors[("t1", "a")] = RuntimeError("conflict")
    scanner, drift = build_scanner(FakeAuthoritative(), clusters)

    result = scanner.scan("t1", drift)

    assert clusters.deleted() == [("t1", "b")]
    assert result.delete_failures == 1
    assert result.orphans_deleted == 1


def test_authoritative_lookup_error_is_not_treated_as_orphan(caplog):
    authoritative = FakeAuthoritative([sc("gold")])
    authoritative.get_errors["gold"] = RuntimeError("cache corrupted")
    clusters = FakeClusters({"t1": [sc("gold", reclaimPolicy="Retain")]})
    scanner, drift = build_scanner(authoritative, clusters)

    with caplog.at_level(logging.ERROR):
        scanner.scan("t1", drift)

    assert clusters.deletes == []
    assert drift.snapshot() == 0
    assert "cache corrupted" in caplog.text


def test_matching_object_needs_no_remedy():
    obj = sc("gold", public=True)
    queue = FakeQueue()
    clusters = FakeClusters({"t1": [obj]})
    scanner, drift = build_scanner(FakeAuthoritative([obj]), clusters, queue=queue)

    result = scanner.scan("t1", drift)

    assert drift.snapshot() == 0
    assert queue.keys == []
    assert clusters.deletes == []
    assert result.mismatches == 0


def test_public_mismatch_is_counted_and_requeued():
    queue = FakeQueue()
    authoritative = FakeAuthoritative([sc("gold", public=True, reclaimPolicy="Retain")])
    clusters = FakeClusters({"t1": [sc("gold", reclaimPolicy="Delete")]})
    scanner, drift = build_scanner(authoritative, clusters, queue=queue)

    result = scanner.scan("t1", drift)

    assert drift.snapshot() == 1
    assert queue.keys == ["t1/gold"]
    assert [item.key for item in result.upward_syncs] == ["t1/gold"]


def test_private_mismatch_is_counted_but_not_requeued():
    queue = FakeQueue()
    authoritative = FakeAuthoritative([sc("silver", reclaimPolicy="Retain")])
    clusters = FakeClusters({"t1": [sc("silver", reclaimPolicy="Delete")]})
    scanner, drift = build_scanner(authoritative, clusters, queue=queue)

    result = scanner.scan("t1", drift)

    assert drift.snapshot() == 1
    assert result.mismatches == 1
    assert queue.keys == []


def test_compare_failure_skips_only_that_object(caplog):
    def broken(authoritative, tenant):
        if tenant.name == "bad":
            raise ValueError("unexpected field type")
        return None

    clusters = FakeClusters({"t1": [sc("bad"), sc("orphan")]})
    drift = DriftAggregator()
    scanner = TenantScanner(
        "storageclass",
        FakeAuthoritative([sc("bad")]),
        clusters,
        EqualityEvaluator("storageclass", strategy=broken),
        RemedyDispatcher(clusters, FakeQueue()),
    )

    with caplog.at_level(logging.ERROR):
        result = scanner.scan("t1", drift)

    assert result.listed is True
    assert clusters.deleted() == [("t1", "orphan")]
    assert "unexpected field type" in caplog.text
