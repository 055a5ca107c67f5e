[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oteloperator"
version = "0.1.0"
description = "OpenTelemetry collector and instrumentation resources, validation, reconciliation tasks and Prometheus target allocation"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "opentelemetry",
    "collector",
    "operator",
    "instrumentation",
    "prometheus",
    "target-allocator",
    "monitoring",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oteloperator"]

[tool.hatch.build.targets.sdist]
include = [
    "oteloperator",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
