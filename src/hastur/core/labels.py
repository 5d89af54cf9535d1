"""Application name resolution and default label management."""

import os
import sys
import threading
from collections.abc import Callable, Iterable, Mapping

from hastur.core.models import APP_NAME_ENV, JSONValue, Labels


class LabelResolver:
    """Computes the labels attached to every outgoing message.

    Two labels are reserved: ``app`` (the resolved application name) and
    ``pid`` (the current process id). They are recomputed on every call and
    always win over stored defaults and caller labels. Stored defaults, in
    turn, win over caller labels that share a key.

    The application name is resolved at call time, in priority order, from
    the explicit override, the ``HASTUR_APP_NAME`` environment variable and
    the name the process was invoked with.

    Example:
        ```python
        resolver = LabelResolver()
        resolver.add({"env": "prod"})
        resolver.merge({"job": "reindex"})
        # {"job": "reindex", "env": "prod", "pid": 4242, "app": "worker.py"}
        ```
    """

    def __init__(
        self,
        app_name: str = "",
        environ: Mapping[str, str] | None = None,
        pid: Callable[[], int] = os.getpid,
        argv0: str | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            app_name: Explicit application name override. Empty means unset.
            environ: Environment mapping consulted for ``HASTUR_APP_NAME``.
                Defaults to ``os.environ`` and is read on every resolution.
            pid: Callable returning the process id.
            argv0: Fallback application name. Defaults to ``sys.argv[0]``.
        """
        self._lock = threading.Lock()
        self._app_name = app_name
        self._environ = os.environ if environ is None else environ
        self._pid = pid
        self._argv0 = argv0
        self._stored: Labels = {}

    @property
    def app_name(self) -> str:
        with self._lock:
            override = self._app_name
        if override:
            return override
        from_env = self._environ.get(APP_NAME_ENV, "")
        if from_env:
            return from_env
        if self._argv0 is not None:
            return self._argv0
        return sys.argv[0] if sys.argv and sys.argv[0] else sys.executable

    def set_app_name(self, name: str) -> None:
        """Override the application name. An empty string clears the override."""
        with self._lock:
            self._app_name = name

    def defaults(self) -> Labels:
        """Return a fresh copy of the default labels including ``app`` and ``pid``."""
        with self._lock:
            labels = dict(self._stored)
        labels["pid"] = self._pid()
        labels["app"] = self.app_name
        return labels

    def merge(self, labels: Mapping[str, JSONValue] | None = None) -> Labels:
        """Overlay the default labels onto caller labels.

        Args:
            labels: Per-call labels. Left unmodified.

        Returns:
            A new mapping holding the caller labels with every default
            label written over them.
        """
        result: Labels = dict(labels) if labels else {}
        result.update(self.defaults())
        return result

    def add(self, labels: Mapping[str, JSONValue]) -> None:
        """Upsert entries into the stored default labels."""
        with self._lock:
            self._stored.update(labels)

    def remove(self, keys: Iterable[str]) -> None:
        """Delete stored default labels by key. Missing keys are ignored."""
        with self._lock:
            for key in keys:
                self._stored.pop(key, None)
