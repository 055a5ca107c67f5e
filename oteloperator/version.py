"""Versions of the operator and of the components it manages."""

from __future__ import annotations

import platform
from dataclasses import dataclass

# Filled in at build time; empty values fall back to "0.0.0" where noted.
_version = ""
_build_date = ""
_otel_col = ""
_target_allocator = ""
_auto_instrumentation_java = ""
_auto_instrumentation_nodejs = ""
_auto_instrumentation_python = ""

_FALLBACK = "0.0.0"


@dataclass(frozen=True)
class Version:
    """The operator's version and the versions of the components it uses."""

    operator: str
    build_date: str
    open_telemetry_collector: str
    python: str
    target_allocator: str
    auto_instrumentation_java: str
    auto_instrumentation_nodejs: str
    auto_instrumentation_python: str

    def __str__(self) -> str:
        return (
            f"Version(Operator='{self.operator}', BuildDate='{self.build_date}', "
            f"OpenTelemetryCollector='{self.open_telemetry_collector}', "
            f"Python='{self.python}', TargetAllocator='{self.target_allocator}', "
            f"AutoInstrumentationJava='{self.auto_instrumentation_java}', "
            f"AutoInstrumentationNodeJS='{self.auto_instrumentation_nodejs}', "
            f"AutoInstrumentationPython='{self.auto_instrumentation_python}')"
        )


def get() -> Version:
    """Return the version information for this build."""
    return Version(
        operator=_version,
        build_date=_build_date,
        open_telemetry_collector=open_telemetry_collector(),
        python=platform.python_version(),
        target_allocator=target_allocator(),
        auto_instrumentation_java=auto_instrumentation_java(),
        auto_instrumentation_nodejs=auto_instrumentation_nodejs(),
        auto_instrumentation_python=auto_instrumentation_python(),
    )


def open_telemetry_collector() -> str:
    """Default collector version when none is given."""
    return _otel_col or _FALLBACK


def target_allocator() -> str:
    """Default target allocator version when none is given."""
    return _target_allocator or _FALLBACK


def auto_instrumentation_java() -> str:
    """Default Java auto-instrumentation version."""
    return _auto_instrumentation_java or _FALLBACK


def auto_instrumentation_nodejs() -> str:
    """Default NodeJS auto-instrumentation version."""
    return _auto_instrumentation_nodejs or _FALLBACK


def auto_instrumentation_python() -> str:
    """Default Python auto-instrumentation version."""
    return _auto_instrumentation_python or _FALLBACK