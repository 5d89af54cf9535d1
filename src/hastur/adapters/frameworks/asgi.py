"""ASGI middleware that reports request metrics to Hastur.

Framework-agnostic: it wraps any ASGI application (FastAPI, Starlette,
Django ASGI) without depending on any of them.
"""

import fnmatch
import time
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hastur.client import HasturClient

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


class HasturMiddleware:
    """ASGI middleware sending a counter and a duration gauge per request.

    For every HTTP request that is not excluded it sends:
    - a counter (default "http.requests", value 1) labelled with method,
      path and status
    - a gauge (default "http.request.duration", seconds) labelled with
      method and path

    An exception raised by the wrapped app is recorded with status 500 and
    re-raised.
    """

    def __init__(
        self,
        app: ASGIApp,
        client: "HasturClient",
        exclude_paths: list[str] | None = None,
        request_counter_name: str = "http.requests",
        request_duration_name: str = "http.request.duration",
    ) -> None:
        """Initialize the middleware with a wrapped app and a Hastur client.

        Args:
            app: The ASGI application to wrap.
            client: Client used to send the metrics.
            exclude_paths: List of paths to exclude from metrics.
                          Supports exact matches and wildcard patterns
                          (e.g., "/internal/*").
            request_counter_name: Name of the per-request counter.
            request_duration_name: Name of the request duration gauge.
        """
        self.app = app
        self.client = client
        self.exclude_paths = exclude_paths or []
        self.request_counter_name = request_counter_name
        self.request_duration_name = request_duration_name

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        captured: dict[str, Any] = {"status": None, "exception": None}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as e:
            captured["exception"] = e
            captured["status"] = 500

        duration = time.perf_counter() - start_time
        self._record(scope, captured["status"], duration)
        if captured["exception"] is not None:
            raise captured["exception"]

    def _record(self, scope: Scope, status: int | None, duration: float) -> None:
        """Send request metrics unless the path is excluded."""
        if status is None or self._path_excluded(scope["path"]):
            return
        method = scope["method"]
        path = scope["path"]
        self.client.counter(
            self.request_counter_name,
            1,
            labels={"method": method, "path": path, "status": str(status)},
        )
        self.client.gauge(
            self.request_duration_name,
            duration,
            labels={"method": method, "path": path},
        )
