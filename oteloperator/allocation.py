"""Distribution of scrape targets among collectors, least-loaded first."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(eq=False)
class Collector:
    """A collector instance and the number of targets assigned to it."""

    name: str
    num_targets: int = 0


@dataclass
class TargetItem:
    """A scrape target of a job, with its labels and assigned collector."""

    job_name: str
    target_url: str
    label: dict[str, str] = field(default_factory=dict)
    link: str = ""
    collector: Collector | None = None

    @property
    def key(self) -> str:
        return self.job_name + self.target_url


def label_set_string(labels: Mapping[str, str]) -> str:
    """Render a label set as ``{name="value", ...}`` with the pairs sorted."""
    pairs = sorted(
        f"{name}={json.dumps(str(value), ensure_ascii=False)}"
        for name, value in labels.items()
    )
    return "{" + ", ".join(pairs) + "}"


class Allocator:
    """Assigns targets to the collector that currently holds the fewest.

    Call ``set_waiting_targets`` with newly discovered targets and then
    ``allocate_targets``; until then the previous assignment is served.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lock = threading.Lock()
        self._targets_waiting: dict[str, TargetItem] = {}
        self._collectors: dict[str, Collector] = {}
        self.target_items: dict[str, TargetItem] = {}
        self._log = logger or logging.getLogger("oteloperator.allocator")

    @property
    def collectors(self) -> dict[str, Collector]:
        """The current collectors by name."""
        return dict(self._collectors)

    def _find_next_collector(self) -> Collector | None:
        chosen: Collector | None = None
        for col in self._collectors.values():
            if chosen is None or col.num_targets < chosen.num_targets:
                chosen = col
        return chosen

    def set_waiting_targets(self, targets: Iterable[TargetItem]) -> None:
        """Replace the set of targets waiting to be allocated."""
        with self._lock:
            self._targets_waiting = {item.key: item for item in targets}

    def set_collectors(self, collectors: Iterable[str]) -> None:
        """Replace the collectors; an empty list leaves the current ones in place."""
        names = list(collectors)
        with self._lock:
            if not names:
                self._log.info("No collector instances present")
                return
            self._collectors = {name: Collector(name=name) for name in names}

    def allocate_targets(self) -> None:
        """Drop targets that disappeared and assign the new ones."""
        with self._lock:
            self._remove_outdated_targets()
            self._process_waiting_targets()

    def reallocate_collectors(self) -> None:
        """Assign all waiting targets afresh among the current collectors."""
        with self._lock:
            self.target_items = {}
            self._process_waiting_targets()

    def _remove_outdated_targets(self) -> None:
        for key in list(self.target_items):
            if key in self._targets_waiting:
                continue
            item = self.target_items.pop(key)
            if item.collector is not None:
                col = self._collectors.get(item.collector.name)
                if col is not None:
                    col.num_targets -= 1

    def _process_waiting_targets(self) -> None:
        for key, waiting in self._targets_waiting.items():
            if key in self.target_items:
                continue
            col = self._find_next_collector()
            if col is None:
                raise RuntimeError("no collectors are available to allocate targets to")
            col.num_targets += 1
            self.target_items[key] = TargetItem(
                job_name=waiting.job_name,
                target_url=waiting.target_url,
                label=waiting.label,
                link=f"/jobs/{waiting.job_name}/targets",
                collector=col,
            )


def _target_group(targets: list[str], labels: Mapping[str, str]) -> dict[str, Any]:
    return {"targets": targets, "labels": dict(labels)}


def get_all_targets_by_job(
    job: str,
    c_map: Mapping[str, list[TargetItem]],
    allocator: Allocator,
) -> dict[str, dict[str, Any]]:
    """Targets of a job per collector, grouped by label set.

    ``c_map`` maps collector name plus job name to the items it holds.
    """
    display: dict[str, dict[str, Any]] = {}
    for item in list(allocator.target_items.values()):
        if item.job_name != job or item.collector is None:
            continue
        grouped: dict[str, list[TargetItem]] = {}
        for target in c_map.get(item.collector.name + item.job_name, []):
            grouped.setdefault(target.job_name + label_set_string(target.label), []).append(
                target
            )

        label_by_url: dict[str, Mapping[str, str]] = {}
        groups = []
        for members in grouped.values():
            urls = []
            for target in members:
                label_by_url[target.target_url] = target.label
                urls.append(target.target_url)
            groups.append(_target_group(urls, label_by_url[urls[0]]))

        display[item.collector.name] = {
            "_link": f"/jobs/{item.job_name}/targets?collector_id={item.collector.name}",
            "targets": groups,
        }
    return display


def get_all_targets_by_collector_and_job(
    collector: str,
    job: str,
    c_map: Mapping[str, list[TargetItem]],
    allocator: Allocator,
) -> list[dict[str, Any]]:
    """Targets of a job held by one collector, grouped by label set."""
    groups: dict[str, list[str]] = {}
    label_by_url: dict[str, Mapping[str, str]] = {}
    if collector in allocator.collectors:
        for items in c_map.values():
            for item in items:
                if (
                    item.collector is not None
                    and item.collector.name == collector
                    and item.job_name == job
                ):
                    groups.setdefault(label_set_string(item.label), []).append(
                        item.target_url
                    )
                    label_by_url[item.target_url] = item.label
    return [_target_group(urls, label_by_url[urls[0]]) for urls in groups.values()]