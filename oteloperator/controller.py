"""The reconciler that drives collector resources towards their desired state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

from .types import OpenTelemetryCollector


class NotFoundError(LookupError):
    """Raised by a client when the requested resource does not exist."""


class CollectorClient(Protocol):
    def get(self, namespace: str, name: str) -> OpenTelemetryCollector: ...


@dataclass
class ReconcileParams:
    """What a reconciliation task needs to do its work."""

    config: Any = None
    client: Any = None
    instance: OpenTelemetryCollector = field(default_factory=OpenTelemetryCollector)
    log: logging.Logger | logging.LoggerAdapter = field(
        default_factory=lambda: logging.getLogger("oteloperator.controllers")
    )
    recorder: Any = None


@dataclass
class Task:
    """A named reconciliation step; failures stop the run when bail_on_error is set."""

    name: str
    do: Callable[[ReconcileParams], None]
    bail_on_error: bool = False


class Reconciler:
    """Reconciles collector resources by running its tasks in order."""

    def __init__(
        self,
        client: CollectorClient | None = None,
        config: Any = None,
        tasks: Iterable[Task] = (),
        recorder: Any = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.tasks = list(tasks)
        self.recorder = recorder
        self.log = logger or logging.getLogger("oteloperator.controllers.OpenTelemetryCollector")

    def reconcile(self, namespace: str, name: str) -> None:
        """Fetch the named collector and run all tasks for it.

        A collector that no longer exists is silently skipped.
        """
        if self.client is None:
            raise RuntimeError("the reconciler has no client")
        log = logging.LoggerAdapter(
            self.log, {"opentelemetrycollector": f"{namespace}/{name}"}
        )
        try:
            instance = self.client.get(namespace, name)
        except NotFoundError:
            return
        except Exception:
            log.exception("unable to fetch OpenTelemetryCollector")
            raise

        params = ReconcileParams(
            config=self.config,
            client=self.client,
            instance=instance,
            log=log,
            recorder=self.recorder,
        )
        self.run_tasks(params)

    def run_tasks(self, params: ReconcileParams) -> None:
        """Run every task; re-raise the failure of a task that bails on error."""
        for task in self.tasks:
            try:
                task.do(params)
            except Exception:
                self.log.exception("failed to reconcile %s", task.name)
                if task.bail_on_error:
                    raise