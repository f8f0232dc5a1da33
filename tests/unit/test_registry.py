from threading import Event

import pytest
from fakes import FakeAuthoritative, FakeClusters, FakeQueue, sc

from vc_patrol.config import PatrolSettings
from vc_patrol.patroller import PatrolDriver, Patroller
from vc_syncer import CheckerRegistry, PatrolRequest
from vc_syncer.drivers import build_patrol_adapter


def build_adapter(resource, authoritative, clusters, queue=None, stop_event=None):
    driver = PatrolDriver(
        PatrolSettings(resource=resource, period=60),
        authoritative,
        clusters,
        queue or FakeQueue(),
    )
    return build_patrol_adapter(Patroller(driver, stop_event or Event()))


def test_registry_dispatches_patrol_requests():
    clusters = FakeClusters({"t1": [sc("orphan")]})
    queue = FakeQueue()
    registry = CheckerRegistry()
    registry.register(
        "storageclass",
        build_adapter("storageclass", FakeAuthoritative([sc("gold", public=True)]), clusters, queue),
    )

    results = registry.handle(PatrolRequest(resource="storageclass"))

    assert [r.resource for r in results] == ["storageclass"]
    assert clusters.deleted() == [("t1", "orphan")]
    assert queue.keys == ["t1/gold"]


def test_registry_runs_every_checker():
    registry = CheckerRegistry()
    registry.register("storageclass", build_adapter("storageclass", FakeAuthoritative(), FakeClusters({})))
    registry.register("priorityclass", build_adapter("priorityclass", FakeAuthoritative(), FakeClusters({})))

    results = registry.handle(PatrolRequest())

    assert sorted(r.resource for r in results) == ["priorityclass", "storageclass"]
    assert registry.names() == ["priorityclass", "storageclass"]


def test_registry_rejects_duplicate_registration():
    registry = CheckerRegistry()
    adapter = build_adapter("storageclass", FakeAuthoritative(), FakeClusters({}))

    registry.register("storageclass", adapter)

    with pytest.raises(ValueError):
        registry.register("storageclass", adapter)


def test_registry_rejects_unknown_checker_and_event():
    registry = CheckerRegistry()

    with pytest.raises(KeyError):
        registry.handle(PatrolRequest(resource="missing"))
    with pytest.raises(TypeError):
        registry.handle("storageclass")  # type: ignore[arg-type]


def test_start_all_starts_patrollers():
    stop_event = Event()
    adapter = build_adapter(
        "storageclass", FakeAuthoritative(), FakeClusters({}), stop_event=stop_event
    )
    registry = CheckerRegistry()
    registry.register("storageclass", adapter)

    registry.start_all()
    stop_event.set()
    registry.join_all(timeout=5)

    assert not adapter.patroller.is_alive()


def test_join_all_skips_checkers_that_never_started():
    adapter = build_adapter("storageclass", FakeAuthoritative(), FakeClusters({}))
    registry = CheckerRegistry()
    registry.register("storageclass", adapter)

    registry.join_all(timeout=1)

    assert adapter.patroller.ident is None


def test_join_all_waits_for_in_flight_pass():
    stop_event = Event()
    clusters = FakeClusters({"t1": [sc("orphan")]})
    entered = Event()
    release = Event()

    def hold(cluster):
        entered.set()
        release.wait(5)

    clusters.list_hook = hold
    adapter = build_adapter("storageclass", FakeAuthoritative(), clusters, stop_event=stop_event)
    registry = CheckerRegistry()
    registry.register("storageclass", adapter)

    registry.start_all()
    assert entered.wait(5)
    stop_event.set()
    release.set()
    registry.join_all(timeout=5)

    assert not adapter.patroller.is_alive()
    assert clusters.deleted() == [("t1", "orphan")]
