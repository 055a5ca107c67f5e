"""Enumerations and the API group/version used by the custom resources."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class Mode(_StrEnum):
    """How the collector is deployed."""

    DAEMONSET = "daemonset"
    DEPLOYMENT = "deployment"
    SIDECAR = "sidecar"
    STATEFULSET = "statefulset"


class Propagator(_StrEnum):
    """Inter-process context propagation type."""

    TRACECONTEXT = "tracecontext"
    BAGGAGE = "baggage"
    B3 = "b3"
    B3MULTI = "b3multi"
    JAEGER = "jaeger"
    XRAY = "xray"
    OTTRACE = "ottrace"
    NONE = "none"


class SamplerType(_StrEnum):
    """Sampler type used by the instrumentation."""

    ALWAYS_ON = "always_on"
    ALWAYS_OFF = "always_off"
    TRACE_ID_RATIO = "traceidratio"
    PARENT_BASED_ALWAYS_ON = "parentbased_always_on"
    PARENT_BASED_ALWAYS_OFF = "parentbased_always_off"
    PARENT_BASED_TRACE_ID_RATIO = "parentbased_traceidratio"
    JAEGER_REMOTE = "jaeger_remote"
    XRAY = "xray"


class UpgradeStrategy(_StrEnum):
    """How the operator handles upgrades of managed resources."""

    AUTOMATIC = "automatic"
    NONE = "none"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with its version."""

    group: str
    version: str

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


GROUP_VERSION = GroupVersion(group="opentelemetry.io", version="v1alpha1")