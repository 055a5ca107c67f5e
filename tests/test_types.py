import json

import pytest

from oteloperator.enums import Mode, Propagator, SamplerType, UpgradeStrategy
from oteloperator.types import (
    EnvVar,
    Exporter,
    Instrumentation,
    InstrumentationSpec,
    Java,
    NodeJS,
    ObjectMeta,
    OpenTelemetryCollector,
    OpenTelemetryCollectorSpec,
    OpenTelemetryCollectorStatus,
    OpenTelemetryTargetAllocator,
    Python,
    Resource,
    Sampler,
)


def _full_instrumentation() -> Instrumentation:
    return Instrumentation(
        metadata=ObjectMeta(
            name="inst",
            namespace="default",
            labels={"app.kubernetes.io/managed-by": "opentelemetry-operator"},
            annotations={"a": "b"},
        ),
        spec=InstrumentationSpec(
            exporter=Exporter(endpoint="http://collector:4317"),
            resource=Resource(attributes={"environment": "dev"}, add_k8s_uid_attributes=True),
            propagators=[Propagator.TRACECONTEXT, Propagator.BAGGAGE, Propagator.B3],
            sampler=Sampler(type=SamplerType.PARENT_BASED_TRACE_ID_RATIO, argument="0.25"),
            env=[EnvVar(name="OTEL_SERVICE_NAME", value="svc")],
            java=Java(image="java-img:1", env=[EnvVar(name="OTEL_JAVA", value="x")]),
            nodejs=NodeJS(image="nodejs-img:1"),
            python=Python(
                image="python-img:1",
                env=[EnvVar(name="OTEL_PY", value_from={"fieldRef": {"fieldPath": "metadata.name"}})],
            ),
        ),
    )


def _full_collector() -> OpenTelemetryCollector:
    return OpenTelemetryCollector(
        metadata=ObjectMeta(name="my-instance", namespace="default"),
        spec=OpenTelemetryCollectorSpec(
            config="receivers: {}",
            upgrade_strategy=UpgradeStrategy.NONE,
            args={"feature-gates": "x"},
            replicas=2,
            max_replicas=5,
            image_pull_policy="Always",
            image="collector:1",
            target_allocator=OpenTelemetryTargetAllocator(enabled=True, image="ta:1"),
            mode=Mode.STATEFULSET,
            service_account="sa",
            security_context={"runAsUser": 1000},
            pod_security_context={"fsGroup": 2000},
            host_network=True,
            volume_claim_templates=[{"metadata": {"name": "data"}}],
            volume_mounts=[{"name": "data", "mountPath": "/data"}],
            volumes=[{"name": "cfg"}],
            ports=[{"name": "web", "port": 80}],
            env=[EnvVar(name="FOO", value="bar")],
            env_from=[{"configMapRef": {"name": "cm"}}],
            resources={"limits": {"cpu": "1"}},
            tolerations=[{"key": "k", "operator": "Exists"}],
            pod_annotations={"p": "q"},
        ),
        status=OpenTelemetryCollectorStatus(replicas=2, version="0.0.2", messages=["ok"]),
    )


def test_instrumentation_round_trip():
    inst = _full_instrumentation()
    assert Instrumentation.from_dict(inst.to_dict()) == inst


def test_instrumentation_round_trip_through_json_text():
    inst = _full_instrumentation()
    text = json.dumps(inst.to_dict())
    assert Instrumentation.from_dict(json.loads(text)) == inst


def test_collector_round_trip():
    col = _full_collector()
    assert OpenTelemetryCollector.from_dict(col.to_dict()) == col


def test_collector_round_trip_through_json_text():
    col = _full_collector()
    text = json.dumps(col.to_dict())
    assert OpenTelemetryCollector.from_dict(json.loads(text)) == col


def test_type_meta_defaults():
    assert Instrumentation().to_dict()["apiVersion"] == "opentelemetry.io/v1alpha1"
    assert Instrumentation().to_dict()["kind"] == "Instrumentation"
    assert OpenTelemetryCollector().to_dict()["kind"] == "OpenTelemetryCollector"


def test_instrumentation_json_field_names():
    spec = _full_instrumentation().to_dict()["spec"]
    assert spec["exporter"] == {"endpoint": "http://collector:4317"}
    assert spec["resource"]["resourceAttributes"] == {"environment": "dev"}
    assert spec["resource"]["addK8sUIDAttributes"] is True
    assert spec["sampler"] == {"type": "parentbased_traceidratio", "argument": "0.25"}
    assert spec["propagators"] == ["tracecontext", "baggage", "b3"]
    assert spec["python"]["env"][0]["valueFrom"] == {"fieldRef": {"fieldPath": "metadata.name"}}


def test_empty_instrumentation_spec_keeps_nested_objects():
    spec = InstrumentationSpec().to_dict()
    assert set(spec) == {"exporter", "resource", "sampler", "java", "nodejs", "python"}
    assert all(value == {} for value in spec.values())


def test_empty_collector_spec_keeps_required_fields():
    spec = OpenTelemetryCollectorSpec().to_dict()
    assert spec == {"upgradeStrategy": "", "targetAllocator": {}, "resources": {}}


def test_zero_replicas_are_kept_but_none_is_omitted():
    assert OpenTelemetryCollectorSpec(replicas=0).to_dict()["replicas"] == 0
    assert "replicas" not in OpenTelemetryCollectorSpec().to_dict()
    assert OpenTelemetryCollectorSpec.from_dict({"replicas": 0}).replicas == 0


def test_from_dict_parses_enums():
    spec = OpenTelemetryCollectorSpec.from_dict({"mode": "sidecar", "upgradeStrategy": "automatic"})
    assert spec.mode is Mode.SIDECAR
    assert spec.upgrade_strategy is UpgradeStrategy.AUTOMATIC


def test_from_empty_data_gives_defaults():
    assert Instrumentation.from_dict(None) == Instrumentation()
    assert OpenTelemetryCollector.from_dict({}) == OpenTelemetryCollector()


def test_invalid_mode_is_rejected():
    with pytest.raises(ValueError):
        OpenTelemetryCollectorSpec.from_dict({"mode": "cronjob"})


def test_invalid_sampler_type_is_rejected():
    with pytest.raises(ValueError):
        Sampler.from_dict({"type": "sometimes"})


def test_invalid_propagator_is_rejected():
    with pytest.raises(ValueError):
        InstrumentationSpec.from_dict({"propagators": ["carrier-pigeon"]})


def test_env_var_only_name_when_empty():
    assert EnvVar(name="OTEL_X").to_dict() == {"name": "OTEL_X"}
    assert EnvVar.from_dict({"name": "OTEL_X", "value": "1"}) == EnvVar(name="OTEL_X", value="1")


def test_object_meta_omits_empty_fields():
    assert ObjectMeta().to_dict() == {}
    meta = ObjectMeta.from_dict({"name": "n", "labels": {"k": "v"}})
    assert meta.labels == {"k": "v"}
    assert meta.annotations == {}


def test_to_dict_does_not_share_mutable_state():
    col = _full_collector()
    data = col.to_dict()
    data["spec"]["args"]["feature-gates"] = "changed"
    data["spec"]["ports"][0]["port"] = 1
    assert col.spec.args["feature-gates"] == "x"
    assert col.spec.ports[0]["port"] == 80