"""HTTP worker that dispatches action requests to their handlers."""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from bdindex.actions.context import Context
from bdindex.actions.metrics import ActionMetrics
from bdindex.actions.payload import Payload
from bdindex.actions.responses import GraphQLError, to_jsonable

log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

Handler = Callable[[Context, Payload], Any]

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _marshal(value: Any) -> bytes:
    text = json.dumps(
        to_jsonable(value), ensure_ascii=False, separators=(",", ":"), allow_nan=False
    )
    for char, escaped in _ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


class ActionsWorker:
    """Serves registered action handlers, one per path."""

    def __init__(self, context: Context, metrics: Optional[ActionMetrics] = None) -> None:
        self.context = context
        self.metrics = metrics if metrics is not None else ActionMetrics()
        self._handlers: dict[str, Handler] = {}

    def register_handler(self, path: str, handler: Handler) -> None:
        """Use handler for every request made to path."""
        if not path:
            raise ValueError("invalid handler path")
        if path in self._handlers:
            raise ValueError(f"multiple registrations for {path}")
        log.debug("registering actions handler for %s", path)
        self._handlers[path] = handler

    def _error(self, path: str, exc: BaseException) -> tuple[int, str, bytes]:
        log.error("error while executing action %s: %s", path, exc)
        return 400, JSON_CONTENT_TYPE, _marshal(GraphQLError(message=str(exc)))

    def handle(self, path: str, body: bytes) -> tuple[int, str, bytes]:
        """Process one request; returns the status, content type and body."""
        handler = self._handlers.get(path)
        if handler is None:
            return 404, TEXT_CONTENT_TYPE, b"404 page not found\n"

        start = self.metrics.clock()
        try:
            payload = Payload.from_json(body)
        except ValueError:
            return 500, TEXT_CONTENT_TYPE, b"invalid payload: failed to unmarshal json\n"

        try:
            result = handler(self.context, payload)
        except Exception as exc:
            self.metrics.record_error(path)
            return self._error(path, exc)

        try:
            data = _marshal(result)
        except (TypeError, ValueError) as exc:
            self.metrics.record_error(path)
            return self._error(path, exc)

        self.metrics.record_success(path)
        self.metrics.record_response_time(path, start)
        return 200, JSON_CONTENT_TYPE, data

    def serve(self, port: int) -> None:
        """Serve requests on every interface at the given port, forever."""
        worker = self

        class _RequestHandler(BaseHTTPRequestHandler):
            def _reply(self, status: int, content_type: str, data: bytes) -> None:
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(data)))
                self.end_headers()
                self.wfile.write(data)

            def _dispatch(self) -> None:
                try:
                    length = int(self.headers.get("Content-Length") or 0)
                    if length < 0:
                        raise ValueError(length)
                except ValueError:
                    self._reply(400, TEXT_CONTENT_TYPE, b"invalid payload\n")
                    return
                body = self.rfile.read(length) if length else b""
                self._reply(*worker.handle(urlsplit(self.path).path, body))

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _dispatch

            def log_message(self, format: str, *args: Any) -> None:
                log.debug(format, *args)

        with ThreadingHTTPServer(("", port), _RequestHandler) as server:
            server.serve_forever()