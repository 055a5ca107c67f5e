"""OpenTelemetry collector and instrumentation resources, validation, reconciliation and Prometheus target allocation."""

__version__ = "0.1.0"