import pytest

from oteloperator.controller import (
    NotFoundError,
    ReconcileParams,
    Reconciler,
    Task,
)
from oteloperator.enums import Mode
from oteloperator.types import ObjectMeta, OpenTelemetryCollector, OpenTelemetryCollectorSpec


class _MemoryClient:
    def __init__(self, *collectors):
        self._items = {(c.metadata.namespace, c.metadata.name): c for c in collectors}

    def get(self, namespace, name):
        try:
            return self._items[(namespace, name)]
        except KeyError:
            raise NotFoundError(f"{namespace}/{name}") from None


class _BrokenClient:
    def get(self, namespace, name):
        raise ConnectionError("api server unreachable")


def _collector(name="my-instance", namespace="default"):
    return OpenTelemetryCollector(
        metadata=ObjectMeta(name=name, namespace=namespace),
        spec=OpenTelemetryCollectorSpec(mode=Mode.DEPLOYMENT),
    )


def test_continue_on_recoverable_failure():
    called = []

    def fail(params):
        raise RuntimeError("should fail!")

    reconciler = Reconciler(
        tasks=[
            Task(name="should-fail", do=fail, bail_on_error=False),
            Task(name="should-be-called", do=lambda p: called.append(True)),
        ]
    )
    assert reconciler.run_tasks(ReconcileParams()) is None
    assert called == [True]


def test_break_on_unrecoverable_error():
    called = []
    expected = RuntimeError("should fail!")

    def fail(params):
        called.append("fail")
        raise expected

    reconciler = Reconciler(
        client=_MemoryClient(_collector()),
        tasks=[
            Task(name="should-fail", do=fail, bail_on_error=True),
            Task(name="should-not-be-called", do=lambda p: called.append("second")),
        ],
    )
    with pytest.raises(RuntimeError) as info:
        reconciler.reconcile("default", "my-instance")
    assert info.value is expected
    assert called == ["fail"]


def test_skip_when_instance_does_not_exist():
    called = []
    reconciler = Reconciler(
        client=_MemoryClient(),
        tasks=[Task(name="should-not-be-called", do=lambda p: called.append(True))],
    )
    assert reconciler.reconcile("default", "non-existing-my-instance") is None
    assert called == []


def test_tasks_receive_instance_and_config():
    seen = []
    config = object()
    instance = _collector()
    reconciler = Reconciler(
        client=_MemoryClient(instance),
        config=config,
        tasks=[Task(name="capture", do=seen.append)],
    )
    reconciler.reconcile("default", "my-instance")
    assert len(seen) == 1
    assert seen[0].instance is instance
    assert seen[0].config is config


def test_tasks_run_in_order():
    order = []
    reconciler = Reconciler(
        tasks=[Task(name=n, do=lambda p, n=n: order.append(n)) for n in ("a", "b", "c")]
    )
    reconciler.run_tasks(ReconcileParams())
    assert order == ["a", "b", "c"]


def test_fetch_error_is_propagated():
    reconciler = Reconciler(client=_BrokenClient(), tasks=[])
    with pytest.raises(ConnectionError, match="unreachable"):
        reconciler.reconcile("default", "my-instance")


def test_reconcile_without_client():
    with pytest.raises(RuntimeError, match="no client"):
        Reconciler().reconcile("default", "my-instance")