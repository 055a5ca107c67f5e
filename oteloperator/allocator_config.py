"""Configuration file of the target allocator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_FILE = "/conf/targetallocator.yaml"
_KNOWN_KEYS = ("label_selector", "config")


class InvalidConfigError(ValueError):
    """Raised when the allocator configuration cannot be parsed."""


@dataclass
class AllocatorConfig:
    """Label selector of the collector pods and the Prometheus configuration."""

    label_selector: dict[str, str] = field(default_factory=dict)
    config: dict[str, Any] | None = None


def _invalid(message: str) -> InvalidConfigError:
    return InvalidConfigError(f"error unmarshaling YAML: {message}")


def _parse_label_selector(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _invalid("label_selector must be a mapping")
    selector = {}
    for key, val in value.items():
        if isinstance(val, (Mapping, list)):
            raise _invalid(f"label_selector value for {key!r} must be a string")
        selector[str(key)] = "" if val is None else str(val)
    return selector


def _parse_prometheus_config(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise _invalid("config must be a mapping")
    scrape_configs = value.get("scrape_configs")
    if scrape_configs is not None:
        if not isinstance(scrape_configs, list):
            raise _invalid("scrape_configs must be a list")
        for scrape in scrape_configs:
            if not isinstance(scrape, Mapping):
                raise _invalid("each scrape config must be a mapping")
            job = scrape.get("job_name")
            if not isinstance(job, str) or not job:
                raise _invalid("job_name is empty")
    return dict(value)


def _parse(text: str) -> AllocatorConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise _invalid(str(exc)) from exc
    if data is None:
        return AllocatorConfig()
    if not isinstance(data, Mapping):
        raise _invalid("the configuration must be a mapping")
    for key in data:
        if key not in _KNOWN_KEYS:
            raise _invalid(f"field {key} not found in the configuration")
    return AllocatorConfig(
        label_selector=_parse_label_selector(data.get("label_selector")),
        config=_parse_prometheus_config(data.get("config")),
    )


def load(file: str = "") -> AllocatorConfig:
    """Read the configuration from ``file``, or from the default location."""
    path = file or DEFAULT_CONFIG_FILE
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    return _parse(text)