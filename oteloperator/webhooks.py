"""Defaulting and validation of the collector and instrumentation resources."""

from __future__ import annotations

import logging
import math
import re
from typing import Iterable

import yaml

from .enums import Mode, SamplerType, UpgradeStrategy
from .types import EnvVar, Instrumentation, ObjectMeta, OpenTelemetryCollector

ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_JAVA = (
    "instrumentation.opentelemetry.io/default-auto-instrumentation-java-image"
)
ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_NODEJS = (
    "instrumentation.opentelemetry.io/default-auto-instrumentation-nodejs-image"
)
ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_PYTHON = (
    "instrumentation.opentelemetry.io/default-auto-instrumentation-python-image"
)

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "opentelemetry-operator"

_ENV_PREFIXES = ("OTEL_", "SPLUNK_")
_RATIO_SAMPLERS = (SamplerType.TRACE_ID_RATIO, SamplerType.PARENT_BASED_TRACE_ID_RATIO)
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)", re.IGNORECASE
)

_instrumentation_log = logging.getLogger("oteloperator.instrumentation-resource")
_collector_log = logging.getLogger("oteloperator.opentelemetrycollector-resource")


class ValidationError(ValueError):
    """Raised when a resource does not pass validation."""


def _ensure_managed_by(metadata: ObjectMeta) -> None:
    if not metadata.labels.get(MANAGED_BY_LABEL):
        metadata.labels[MANAGED_BY_LABEL] = MANAGED_BY_VALUE


def default_instrumentation(inst: Instrumentation) -> Instrumentation:
    """Fill in the managed-by label and default images from the annotations."""
    _instrumentation_log.info("default name=%s", inst.metadata.name)
    _ensure_managed_by(inst.metadata)

    annotations = inst.metadata.annotations
    for language, annotation in (
        (inst.spec.java, ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_JAVA),
        (inst.spec.nodejs, ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_NODEJS),
        (inst.spec.python, ANNOTATION_DEFAULT_AUTO_INSTRUMENTATION_PYTHON),
    ):
        if not language.image and annotation in annotations:
            language.image = annotations[annotation]
    return inst


def _parse_rate(argument: str) -> float:
    if not _FLOAT_RE.fullmatch(argument):
        raise ValueError(argument)
    return float(argument)


def _validate_env(envs: Iterable[EnvVar]) -> None:
    for env in envs:
        if not env.name.startswith(_ENV_PREFIXES):
            raise ValidationError(
                f'env name should start with "OTEL_" or "SPLUNK_": {env.name}'
            )


def validate_instrumentation(inst: Instrumentation) -> None:
    """Check the sampler argument and the names of the environment variables."""
    _instrumentation_log.info("validate name=%s", inst.metadata.name)
    sampler = inst.spec.sampler
    if sampler.type in _RATIO_SAMPLERS and sampler.argument:
        try:
            rate = _parse_rate(sampler.argument)
        except ValueError:
            raise ValidationError(
                f"spec.sampler.argument is not a number: {sampler.argument}"
            ) from None
        if not math.isnan(rate) and (rate < 0 or rate > 1):
            raise ValidationError(
                f"spec.sampler.argument should be in rage [0..1]: {sampler.argument}"
            )

    _validate_env(inst.spec.env)
    _validate_env(inst.spec.java.env)
    _validate_env(inst.spec.nodejs.env)
    _validate_env(inst.spec.python.env)


def default_collector(collector: OpenTelemetryCollector) -> OpenTelemetryCollector:
    """Fill in the deployment mode, upgrade strategy and managed-by label."""
    spec = collector.spec
    if spec.mode is None:
        spec.mode = Mode.DEPLOYMENT
    if spec.upgrade_strategy is None:
        spec.upgrade_strategy = UpgradeStrategy.AUTOMATIC
    _ensure_managed_by(collector.metadata)
    _collector_log.info("default name=%s", collector.metadata.name)
    return collector


def validate_collector(collector: OpenTelemetryCollector) -> None:
    """Check that the attributes used are supported by the collector's mode."""
    _collector_log.info("validate name=%s", collector.metadata.name)
    spec = collector.spec
    mode = spec.mode.value if spec.mode is not None else ""

    if spec.mode != Mode.STATEFULSET and spec.volume_claim_templates:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'volumeClaimTemplates'"
        )

    if spec.mode in (Mode.SIDECAR, Mode.DAEMONSET) and spec.replicas is not None:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'replicas'"
        )

    if spec.mode == Mode.SIDECAR and spec.tolerations:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the attribute 'tolerations'"
        )

    if spec.target_allocator.enabled and spec.mode != Mode.STATEFULSET:
        raise ValidationError(
            f"the OpenTelemetry Collector mode is set to {mode}, which does not "
            "support the target allocation deployment"
        )

    if spec.target_allocator.enabled:
        try:
            yaml.safe_load(spec.config)
        except yaml.YAMLError as exc:
            raise ValidationError(
                "the OpenTelemetry Spec Prometheus configuration is incorrect, "
                f"{exc}"
            ) from exc

    if spec.max_replicas is not None:
        if spec.max_replicas < 1:
            raise ValidationError(
                "the OpenTelemetry Spec autoscale configuration is incorrect, "
                "maxReplicas should be defined and more than one"
            )
        if spec.replicas is not None and spec.replicas > spec.max_replicas:
            raise ValidationError(
                "the OpenTelemetry Spec autoscale configuration is incorrect, "
                "replicas must not be greater than maxReplicas"
            )