"""HTTP server exposing the jobs and targets held by the allocator."""

from __future__ import annotations

import json
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Iterable
from urllib.parse import parse_qs, unquote, urlsplit

from .allocation import (
    Allocator,
    TargetItem,
    get_all_targets_by_collector_and_job,
    get_all_targets_by_job,
)


def _split_address(addr: str) -> tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {addr!r}")
    return host.strip("[]"), int(port)


def _route(path: str) -> tuple[str, dict[str, str]] | None:
    if path == "/jobs":
        return "jobs", {}
    parts = path.split("/")
    if len(parts) == 4 and parts[0] == "" and parts[1] == "jobs" and parts[3] == "targets":
        if parts[2]:
            return "targets", {"job_id": unquote(parts[2])}
    return None


class AllocatorServer:
    """Serves ``GET /jobs`` and ``GET /jobs/{job_id}/targets`` for an allocator."""

    def __init__(
        self,
        allocator: Allocator,
        listen_addr: str = ":8080",
        *,
        closers: Iterable[Callable[[], None]] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self.allocator = allocator
        self.listen_addr = listen_addr
        self._host, self._port = _split_address(listen_addr)
        self._closers = list(closers)
        self._log = logger or logging.getLogger("oteloperator.allocator")
        self._httpd: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The host and port the running server is bound to."""
        if self._httpd is None:
            raise RuntimeError("the server is not running")
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def jobs(self) -> dict[str, dict[str, str]]:
        """The link to the targets of every job."""
        return {
            item.job_name: {"_link": item.link}
            for item in list(self.allocator.target_items.values())
        }

    def targets(self, job_id: str, collector_id: str | None = None) -> Any:
        """Targets of a job, for all collectors or for one of them."""
        compare: dict[str, list[TargetItem]] = {}
        for item in list(self.allocator.target_items.values()):
            if item.collector is None:
                continue
            compare.setdefault(item.collector.name + item.job_name, []).append(item)
        if collector_id is None:
            return get_all_targets_by_job(job_id, compare, self.allocator)
        return get_all_targets_by_collector_and_job(
            collector_id, job_id, compare, self.allocator
        )

    def start(self) -> None:
        """Bind the listen address and serve requests in a background thread."""
        if self._httpd is not None:
            raise RuntimeError("the server is already running")
        self._log.info("Starting server...")
        self._httpd = ThreadingHTTPServer((self._host, self._port), self._handler_class())
        self._thread = threading.Thread(
            target=self._httpd.serve_forever, name="oteloperator-allocator", daemon=True
        )
        self._thread.start()

    def shutdown(self) -> None:
        """Close the attached clients and stop serving."""
        self._log.info("Shutting down server...")
        for close in self._closers:
            close()
        httpd, self._httpd = self._httpd, None
        thread, self._thread = self._thread, None
        if httpd is not None:
            httpd.shutdown()
            httpd.server_close()
        if thread is not None:
            thread.join()

    def __enter__(self) -> AllocatorServer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        server = self

        class _Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                server._serve(self, "GET")

            def do_POST(self) -> None:
                server._serve(self, "POST")

            def do_PUT(self) -> None:
                server._serve(self, "PUT")

            def do_DELETE(self) -> None:
                server._serve(self, "DELETE")

            def do_PATCH(self) -> None:
                server._serve(self, "PATCH")

            def log_message(self, format: str, *args: Any) -> None:
                server._log.debug(format, *args)

        return _Handler

    def _serve(self, handler: BaseHTTPRequestHandler, method: str) -> None:
        url = urlsplit(handler.path)
        route = _route(url.path)
        if route is None:
            self._send(handler, HTTPStatus.NOT_FOUND, b"404 page not found\n", "text/plain; charset=utf-8")
            return
        if method != "GET":
            self._send(handler, HTTPStatus.METHOD_NOT_ALLOWED, b"", None)
            return

        name, params = route
        if name == "jobs":
            data: Any = self.jobs()
        else:
            query = parse_qs(url.query, keep_blank_values=True)
            collector_ids = query.get("collector_id")
            data = self.targets(
                params["job_id"], collector_ids[0] if collector_ids else None
            )
        body = json.dumps(data).encode("utf-8") + b"\n"
        self._send(handler, HTTPStatus.OK, body, "application/json")

    @staticmethod
    def _send(
        handler: BaseHTTPRequestHandler,
        status: HTTPStatus,
        body: bytes,
        content_type: str | None,
    ) -> None:
        handler.send_response(status)
        if content_type:
            handler.send_header("Content-Type", content_type)
        handler.send_header("Content-Length", str(len(body)))
        handler.end_headers()
        if body:
            handler.wfile.write(body)