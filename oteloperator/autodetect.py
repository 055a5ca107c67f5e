"""Detection of traits of the cluster the operator runs in."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from enum import Enum
from typing import Any

_OPENSHIFT_ROUTE_GROUP = "route.openshift.io"
_IGNORED_STATUSES = (403, 404)


class Platform(Enum):
    """The kind of platform the operator runs on."""

    UNKNOWN = "Unknown"
    KUBERNETES = "Kubernetes"
    OPENSHIFT = "OpenShift"

    def __str__(self) -> str:
        return self.value


class AutoDetect:
    """Detects traits of the cluster reachable at the given API server host."""

    def __init__(self, host: str, timeout: float = 10.0) -> None:
        if not host:
            raise ValueError("an API server host is required")
        self.host = host.rstrip("/")
        self.timeout = timeout

    def platform(self) -> Platform:
        """Return OpenShift when its route API group is served, else Kubernetes."""
        if _OPENSHIFT_ROUTE_GROUP in self._server_group_names():
            return Platform.OPENSHIFT
        return Platform.KUBERNETES

    def _server_group_names(self) -> list[str]:
        names: list[str] = []
        core = self._get_json("/api")
        if core and core.get("versions"):
            names.append("")
        groups = self._get_json("/apis")
        if groups:
            names.extend(group.get("name", "") for group in groups.get("groups") or [])
        return names

    def _get_json(self, path: str) -> dict[str, Any] | None:
        request = urllib.request.Request(
            self.host + path, headers={"Accept": "application/json"}
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as exc:
            exc.close()
            if exc.code in _IGNORED_STATUSES:
                return None
            raise ConnectionError(
                f"the server returned status {exc.code} for {path}"
            ) from exc
        except urllib.error.URLError as exc:
            raise ConnectionError(f"unable to reach {self.host}: {exc.reason}") from exc

        if not body:
            return None
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ValueError(f"invalid JSON returned for {path}") from exc
        return data if isinstance(data, dict) else None