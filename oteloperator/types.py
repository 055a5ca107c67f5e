"""Custom resource types for collectors and instrumentation, with their JSON forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .enums import GROUP_VERSION, Mode, Propagator, SamplerType, UpgradeStrategy

INSTRUMENTATION_KIND = "Instrumentation"
COLLECTOR_KIND = "OpenTelemetryCollector"


def _mapping(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return data if data is not None else {}


def _str_dict(data: Mapping[str, Any] | None) -> dict[str, str]:
    return {str(k): str(v) for k, v in (data or {}).items()}


def _raw_list(items: Any) -> list[dict[str, Any]]:
    return [dict(item) for item in items or []]


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


@dataclass
class ObjectMeta:
    """Name, namespace, labels and annotations of a resource."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name:
            out["name"] = self.name
        if self.namespace:
            out["namespace"] = self.namespace
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ObjectMeta:
        data = _mapping(data)
        return cls(
            name=data.get("name", ""),
            namespace=data.get("namespace", ""),
            labels=_str_dict(data.get("labels")),
            annotations=_str_dict(data.get("annotations")),
        )


@dataclass
class EnvVar:
    """An environment variable, given as a value or a reference to one."""

    name: str
    value: str = ""
    value_from: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        if self.value:
            out["value"] = self.value
        if self.value_from:
            out["valueFrom"] = dict(self.value_from)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EnvVar:
        value_from = data.get("valueFrom")
        return cls(
            name=data.get("name", ""),
            value=data.get("value", ""),
            value_from=dict(value_from) if value_from else None,
        )


def _env_list(items: Any) -> list[EnvVar]:
    return [EnvVar.from_dict(item) for item in items or []]


def _env_dicts(envs: list[EnvVar]) -> list[dict[str, Any]]:
    return [env.to_dict() for env in envs]


@dataclass
class Exporter:
    """OTLP exporter configuration."""

    endpoint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"endpoint": self.endpoint} if self.endpoint else {}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Exporter:
        return cls(endpoint=_mapping(data).get("endpoint", ""))


@dataclass
class Resource:
    """Resource attributes added to the telemetry."""

    attributes: dict[str, str] = field(default_factory=dict)
    add_k8s_uid_attributes: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.attributes:
            out["resourceAttributes"] = dict(self.attributes)
        if self.add_k8s_uid_attributes:
            out["addK8sUIDAttributes"] = True
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Resource:
        data = _mapping(data)
        return cls(
            attributes=_str_dict(data.get("resourceAttributes")),
            add_k8s_uid_attributes=bool(data.get("addK8sUIDAttributes", False)),
        )


@dataclass
class Sampler:
    """Sampling configuration: a sampler type and its argument."""

    type: SamplerType | None = None
    argument: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.type is not None:
            out["type"] = self.type.value
        if self.argument:
            out["argument"] = self.argument
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Sampler:
        data = _mapping(data)
        raw_type = data.get("type")
        return cls(
            type=SamplerType(raw_type) if raw_type else None,
            argument=data.get("argument", ""),
        )


@dataclass
class _LanguageConfig:
    image: str = ""
    env: list[EnvVar] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.image:
            out["image"] = self.image
        if self.env:
            out["env"] = _env_dicts(self.env)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None):
        data = _mapping(data)
        return cls(image=data.get("image", ""), env=_env_list(data.get("env")))


@dataclass
class Java(_LanguageConfig):
    """Java agent image and Java specific environment variables."""


@dataclass
class NodeJS(_LanguageConfig):
    """NodeJS instrumentation image and NodeJS specific environment variables."""


@dataclass
class Python(_LanguageConfig):
    """Python instrumentation image and Python specific environment variables."""


@dataclass
class InstrumentationSpec:
    """Desired state of the SDK and auto-instrumentation."""

    exporter: Exporter = field(default_factory=Exporter)
    resource: Resource = field(default_factory=Resource)
    propagators: list[Propagator] = field(default_factory=list)
    sampler: Sampler = field(default_factory=Sampler)
    env: list[EnvVar] = field(default_factory=list)
    java: Java = field(default_factory=Java)
    nodejs: NodeJS = field(default_factory=NodeJS)
    python: Python = field(default_factory=Python)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "exporter": self.exporter.to_dict(),
            "resource": self.resource.to_dict(),
        }
        if self.propagators:
            out["propagators"] = [p.value for p in self.propagators]
        out["sampler"] = self.sampler.to_dict()
        if self.env:
            out["env"] = _env_dicts(self.env)
        out["java"] = self.java.to_dict()
        out["nodejs"] = self.nodejs.to_dict()
        out["python"] = self.python.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> InstrumentationSpec:
        data = _mapping(data)
        return cls(
            exporter=Exporter.from_dict(data.get("exporter")),
            resource=Resource.from_dict(data.get("resource")),
            propagators=[Propagator(p) for p in data.get("propagators") or []],
            sampler=Sampler.from_dict(data.get("sampler")),
            env=_env_list(data.get("env")),
            java=Java.from_dict(data.get("java")),
            nodejs=NodeJS.from_dict(data.get("nodejs")),
            python=Python.from_dict(data.get("python")),
        )


@dataclass
class Instrumentation:
    """The instrumentation custom resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: InstrumentationSpec = field(default_factory=InstrumentationSpec)
    api_version: str = str(GROUP_VERSION)
    kind: str = INSTRUMENTATION_KIND

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.api_version:
            out["apiVersion"] = self.api_version
        if self.kind:
            out["kind"] = self.kind
        out["metadata"] = self.metadata.to_dict()
        out["spec"] = self.spec.to_dict()
        out["status"] = {}
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Instrumentation:
        data = _mapping(data)
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=InstrumentationSpec.from_dict(data.get("spec")),
            api_version=data.get("apiVersion", str(GROUP_VERSION)),
            kind=data.get("kind", INSTRUMENTATION_KIND),
        )


@dataclass
class OpenTelemetryTargetAllocator:
    """Whether and with which image a Prometheus target allocator is deployed."""

    enabled: bool = False
    image: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.enabled:
            out["enabled"] = True
        if self.image:
            out["image"] = self.image
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OpenTelemetryTargetAllocator:
        data = _mapping(data)
        return cls(enabled=bool(data.get("enabled", False)), image=data.get("image", ""))


@dataclass
class OpenTelemetryCollectorSpec:
    """Desired state of a collector.

    Nested Kubernetes objects (volumes, ports, security contexts and the like)
    are kept in their raw dictionary form.
    """

    config: str = ""
    upgrade_strategy: UpgradeStrategy | None = None
    args: dict[str, str] = field(default_factory=dict)
    replicas: int | None = None
    max_replicas: int | None = None
    image_pull_policy: str = ""
    image: str = ""
    target_allocator: OpenTelemetryTargetAllocator = field(
        default_factory=OpenTelemetryTargetAllocator
    )
    mode: Mode | None = None
    service_account: str = ""
    security_context: dict[str, Any] | None = None
    pod_security_context: dict[str, Any] | None = None
    host_network: bool = False
    volume_claim_templates: list[dict[str, Any]] = field(default_factory=list)
    volume_mounts: list[dict[str, Any]] = field(default_factory=list)
    volumes: list[dict[str, Any]] = field(default_factory=list)
    ports: list[dict[str, Any]] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    env_from: list[dict[str, Any]] = field(default_factory=list)
    resources: dict[str, Any] = field(default_factory=dict)
    tolerations: list[dict[str, Any]] = field(default_factory=list)
    pod_annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.config:
            out["config"] = self.config
        out["upgradeStrategy"] = (
            self.upgrade_strategy.value if self.upgrade_strategy is not None else ""
        )
        if self.args:
            out["args"] = dict(self.args)
        if self.replicas is not None:
            out["replicas"] = self.replicas
        if self.max_replicas is not None:
            out["maxReplicas"] = self.max_replicas
        if self.image_pull_policy:
            out["imagePullPolicy"] = self.image_pull_policy
        if self.image:
            out["image"] = self.image
        out["targetAllocator"] = self.target_allocator.to_dict()
        if self.mode is not None:
            out["mode"] = self.mode.value
        if self.service_account:
            out["serviceAccount"] = self.service_account
        if self.security_context is not None:
            out["securityContext"] = dict(self.security_context)
        if self.pod_security_context is not None:
            out["podSecurityContext"] = dict(self.pod_security_context)
        if self.host_network:
            out["hostNetwork"] = True
        for key, items in (
            ("volumeClaimTemplates", self.volume_claim_templates),
            ("volumeMounts", self.volume_mounts),
            ("volumes", self.volumes),
            ("ports", self.ports),
        ):
            if items:
                out[key] = _raw_list(items)
        if self.env:
            out["env"] = _env_dicts(self.env)
        if self.env_from:
            out["envFrom"] = _raw_list(self.env_from)
        out["resources"] = dict(self.resources)
        if self.tolerations:
            out["tolerations"] = _raw_list(self.tolerations)
        if self.pod_annotations:
            out["podAnnotations"] = dict(self.pod_annotations)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OpenTelemetryCollectorSpec:
        data = _mapping(data)
        strategy = data.get("upgradeStrategy")
        mode = data.get("mode")
        security_context = data.get("securityContext")
        pod_security_context = data.get("podSecurityContext")
        return cls(
            config=data.get("config", ""),
            upgrade_strategy=UpgradeStrategy(strategy) if strategy else None,
            args=_str_dict(data.get("args")),
            replicas=_optional_int(data.get("replicas")),
            max_replicas=_optional_int(data.get("maxReplicas")),
            image_pull_policy=data.get("imagePullPolicy", ""),
            image=data.get("image", ""),
            target_allocator=OpenTelemetryTargetAllocator.from_dict(
                data.get("targetAllocator")
            ),
            mode=Mode(mode) if mode else None,
            service_account=data.get("serviceAccount", ""),
            security_context=(
                dict(security_context) if security_context is not None else None
            ),
            pod_security_context=(
                dict(pod_security_context) if pod_security_context is not None else None
            ),
            host_network=bool(data.get("hostNetwork", False)),
            volume_claim_templates=_raw_list(data.get("volumeClaimTemplates")),
            volume_mounts=_raw_list(data.get("volumeMounts")),
            volumes=_raw_list(data.get("volumes")),
            ports=_raw_list(data.get("ports")),
            env=_env_list(data.get("env")),
            env_from=_raw_list(data.get("envFrom")),
            resources=dict(data.get("resources") or {}),
            tolerations=_raw_list(data.get("tolerations")),
            pod_annotations=_str_dict(data.get("podAnnotations")),
        )


@dataclass
class OpenTelemetryCollectorStatus:
    """Observed state of a collector."""

    replicas: int = 0
    version: str = ""
    messages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.replicas:
            out["replicas"] = self.replicas
        if self.version:
            out["version"] = self.version
        if self.messages:
            out["messages"] = list(self.messages)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OpenTelemetryCollectorStatus:
        data = _mapping(data)
        return cls(
            replicas=int(data.get("replicas", 0)),
            version=data.get("version", ""),
            messages=[str(m) for m in data.get("messages") or []],
        )


@dataclass
class OpenTelemetryCollector:
    """The collector custom resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OpenTelemetryCollectorSpec = field(default_factory=OpenTelemetryCollectorSpec)
    status: OpenTelemetryCollectorStatus = field(
        default_factory=OpenTelemetryCollectorStatus
    )
    api_version: str = str(GROUP_VERSION)
    kind: str = COLLECTOR_KIND

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.api_version:
            out["apiVersion"] = self.api_version
        if self.kind:
            out["kind"] = self.kind
        out["metadata"] = self.metadata.to_dict()
        out["spec"] = self.spec.to_dict()
        out["status"] = self.status.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OpenTelemetryCollector:
        data = _mapping(data)
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata")),
            spec=OpenTelemetryCollectorSpec.from_dict(data.get("spec")),
            status=OpenTelemetryCollectorStatus.from_dict(data.get("status")),
            api_version=data.get("apiVersion", str(GROUP_VERSION)),
            kind=data.get("kind", COLLECTOR_KIND),
        )