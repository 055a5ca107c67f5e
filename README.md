# oteloperator

Building blocks for managing OpenTelemetry collectors and
auto-instrumentation, and for spreading Prometheus scrape targets over a set
of collectors.

| Module | What it holds |
| --- | --- |
| `oteloperator.enums` | `Mode`, `Propagator`, `SamplerType`, `UpgradeStrategy`, `GroupVersion` |
| `oteloperator.types` | `OpenTelemetryCollector`, `Instrumentation` and their parts, with `to_dict` / `from_dict` |
| `oteloperator.webhooks` | `default_*` and `validate_*` functions, `ValidationError` |
| `oteloperator.version` | `Version` and `get()` |
| `oteloperator.autodetect` | `Platform` and `AutoDetect` |
| `oteloperator.config` | `Config`, with periodic platform detection |
| `oteloperator.controller` | `Reconciler`, `Task`, `ReconcileParams`, `NotFoundError` |
| `oteloperator.allocation` | `Allocator`, `TargetItem`, `Collector` and grouping helpers |
| `oteloperator.allocator_config` | `AllocatorConfig`, `load`, `InvalidConfigError` |
| `oteloperator.allocator_server` | `AllocatorServer`, an HTTP server over an `Allocator` |

Python 3.10 or later is required; the only dependency is PyYAML.

## Resources, defaulting and validation

```python
from oteloperator.types import Instrumentation, OpenTelemetryCollector
from oteloperator.webhooks import (
    ValidationError,
    default_collector,
    default_instrumentation,
    validate_collector,
    validate_instrumentation,
)

inst = Instrumentation.from_dict({"spec": {"sampler": {"type": "traceidratio", "argument": "0.25"}}})
default_instrumentation(inst)
validate_instrumentation(inst)

collector = default_collector(OpenTelemetryCollector())
try:
    validate_collector(collector)
except ValidationError as err:
    print(f"rejected: {err}")
```

`default_instrumentation` adds the `app.kubernetes.io/managed-by` label and
takes the Java, NodeJS and Python images from the
`instrumentation.opentelemetry.io/default-auto-instrumentation-*-image`
annotations when the spec gives none. `validate_instrumentation` requires the
argument of a ratio sampler to be a number in `[0..1]` and every environment
variable name to start with `OTEL_` or `SPLUNK_`.

`default_collector` sets the `deployment` mode and the `automatic` upgrade
strategy when missing, plus the managed-by label. `validate_collector` rejects
volume claim templates outside `statefulset` mode, replicas in `sidecar` and
`daemonset` modes, tolerations in `sidecar` mode, a target allocator outside
`statefulset` mode, a `maxReplicas` below 1 and replicas above `maxReplicas`.
With the target allocator enabled it only checks that the collector
configuration is well-formed YAML.

## Versions

```python
from oteloperator import version

print(version.get())
print(version.open_telemetry_collector())  # "0.0.0" unless set at build time
```

## Configuration and platform detection

```python
from oteloperator.autodetect import AutoDetect
from oteloperator.config import Config

cfg = Config(collector_image="my-collector:1.0", autodetect=AutoDetect("http://localhost:8001"))
cfg.start_auto_detect()   # detects once, then every 5 seconds in the background
print(cfg.platform)
cfg.stop_auto_detect()
```

`AutoDetect.platform()` queries `/api` and `/apis` on the given host and
reports `Platform.OPENSHIFT` when the `route.openshift.io` group is served,
otherwise `Platform.KUBERNETES`; an unreachable host or error status raises
`ConnectionError`. Callbacks given as `on_change` or through `add_on_change`
run when the detected platform changes.

## Reconciling

`Reconciler(client=..., tasks=[...])` fetches a collector with
`client.get(namespace, name)` and runs its `Task`s in order. A client that
raises `NotFoundError` makes `reconcile` return quietly. A failing task is
logged; when its `bail_on_error` is set the error is raised and later tasks
are skipped.

## Allocating targets

```python
from oteloperator.allocation import Allocator, TargetItem

allocator = Allocator()
allocator.set_collectors(["col-1", "col-2", "col-3"])
allocator.set_waiting_targets(
    [TargetItem(job_name="node", target_url=f"10.0.0.{n}:9100") for n in range(1, 7)]
)
allocator.allocate_targets()
for key, item in allocator.target_items.items():
    print(key, item.collector.name)
```

Each new target goes to the collector holding the fewest targets; targets
missing from the latest waiting set are dropped on `allocate_targets`, and
`reallocate_collectors` assigns everything afresh. Allocating with no
collectors raises `RuntimeError`.

`get_all_targets_by_job` and `get_all_targets_by_collector_and_job` group
targets by label set. `AllocatorServer` serves them as JSON:

```python
from oteloperator.allocator_server import AllocatorServer

with AllocatorServer(allocator, "127.0.0.1:0") as server:
    host, port = server.address
    # GET /jobs
    # GET /jobs/node/targets
    # GET /jobs/node/targets?collector_id=col-1
```

`oteloperator.allocator_config.load(path)` reads a YAML file with a
`label_selector` mapping and a Prometheus `config` section (default path
`/conf/targetallocator.yaml`), and raises `InvalidConfigError` on malformed
YAML, unknown top-level keys or scrape configs without a `job_name`.

## What the package does not do

- It does not talk to a cluster beyond the platform check: there is no
  client for reading or writing resources, no pod watching and no admission
  webhook server. The `Reconciler` has no built-in tasks; you supply them.
- It does not discover Prometheus targets; targets are handed to the
  `Allocator` by the caller.
- It installs no command; everything is used from Python.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.