"""Hastur client: configuration state and message dispatch.

A single HasturClient holds the destination, the default labels and the
application name override. Message methods build a message, merge labels,
encode it and write one datagram. They never raise: encoding failures are
reported as a fallback log message and transport errors are dropped.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import TracebackType
from typing import TypeVar

from hastur.adapters.scheduler import ThreadScheduler
from hastur.adapters.transport.udp import UDPTransport
from hastur.config import ClientConfig
from hastur.core import messages
from hastur.core.encoding import encode_message
from hastur.core.exceptions import EncodingError
from hastur.core.labels import LabelResolver
from hastur.core.models import (
    DEFAULT_HEARTBEAT_NAME,
    PROCESS_HEARTBEAT_NAME,
    Interval,
    JSONValue,
    Message,
)
from hastur.core.ports import (
    ScheduledTask,
    SchedulerPort,
    TransportFactory,
    TransportPort,
)
from hastur.core.timestamps import Timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")

LabelsArg = Mapping[str, JSONValue] | None


class HasturClient:
    """Publishes Hastur messages to the local agent.

    Most message kinds come in two forms: ``<kind>()`` takes the commonly
    used fields with timestamp and labels as optional keywords, and
    ``<kind>_full()`` takes every field explicitly.

    Example:
        ```python
        client = HasturClient()
        client.set_app_name("billing.worker")
        client.mark("deploy.finished", "green")
        client.counter("jobs.processed", 1, labels={"queue": "default"})
        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport_factory: TransportFactory = UDPTransport,
        scheduler: SchedulerPort | None = None,
        resolver: LabelResolver | None = None,
    ) -> None:
        """Initialize the client and open the transport.

        Args:
            config: Initial settings. Defaults to ClientConfig().
            transport_factory: Builds a transport for ``(address, port)``.
            scheduler: Runs periodic callbacks. Defaults to ThreadScheduler.
            resolver: Label resolver. Defaults to one built from ``config``.

        Raises:
            ConfigurationError: If the initial destination cannot be used.
        """
        self.config = config or ClientConfig()
        self.send_process_heartbeat = self.config.send_process_heartbeat
        self._transport_factory = transport_factory
        self._scheduler = scheduler or ThreadScheduler()
        self._resolver = resolver or LabelResolver(app_name=self.config.app_name)
        if self.config.default_labels:
            self._resolver.add(self.config.default_labels)

        self._lock = threading.Lock()
        self._reporting_failure = False
        self._heartbeat_task: ScheduledTask | None = None
        self._udp_address = self.config.udp_address
        self._udp_port = self.config.udp_port
        self._transport = transport_factory(self._udp_address, self._udp_port)

    # === Configuration ===

    @property
    def udp_address(self) -> str:
        return self._udp_address

    @property
    def udp_port(self) -> int:
        return self._udp_port

    @property
    def transport(self) -> TransportPort:
        return self._transport

    def set_udp_address(self, address: str) -> None:
        """Point the client at a new agent host.

        Raises:
            ConfigurationError: If the new destination cannot be used. The
                previous destination stays in effect.
        """
        self._reconnect(address, self._udp_port)

    def set_udp_port(self, port: int) -> None:
        """Point the client at a new agent port.

        Raises:
            ConfigurationError: If the new destination cannot be used. The
                previous destination stays in effect.
        """
        self._reconnect(self._udp_address, port)

    def _reconnect(self, address: str, port: int) -> None:
        transport = self._transport_factory(address, port)
        with self._lock:
            old = self._transport
            self._transport = transport
            self._udp_address = address
            self._udp_port = port
        old.close()
        logger.debug("Hastur destination set to %s:%s", address, port)

    @property
    def app_name(self) -> str:
        """Resolved application name attached as the ``app`` label."""
        return self._resolver.app_name

    def get_app_name(self) -> str:
        return self._resolver.app_name

    def set_app_name(self, name: str) -> None:
        """Override the application name. An empty string clears the override."""
        self._resolver.set_app_name(name)

    def default_labels(self) -> dict[str, JSONValue]:
        """Labels attached to every message, including ``app`` and ``pid``."""
        return self._resolver.defaults()

    def add_default_labels(self, labels: Mapping[str, JSONValue]) -> None:
        self._resolver.add(labels)

    def remove_default_labels(self, *keys: str) -> None:
        """Remove labels added with add_default_labels.

        Unknown keys are ignored. ``app`` and ``pid`` cannot be removed.
        """
        self._resolver.remove(keys)

    # === Dispatch ===

    def send(self, message: Message) -> None:
        """Encode and write a message, never raising to the caller."""
        try:
            payload = encode_message(message)
        except EncodingError as e:
            self._report_encoding_error(e)
            return
        with self._lock:
            transport = self._transport
        transport.send(payload)

    def _report_encoding_error(self, error: EncodingError) -> None:
        with self._lock:
            if self._reporting_failure:
                logger.debug("Dropping unencodable fallback message: %s", error)
                return
            self._reporting_failure = True
        try:
            logger.warning("Hastur message could not be encoded: %s", error)
            self.log(f"Error marshalling json message: {error}", "")
        finally:
            with self._lock:
                self._reporting_failure = False

    def _emit(
        self,
        build: Callable[..., Message],
        *fields: object,
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        try:
            message = build(*fields, timestamp, self._resolver.merge(labels))
        except EncodingError as e:
            self._report_encoding_error(e)
            return
        self.send(message)

    # === Messages ===

    def mark_full(
        self, name: str, value: str, timestamp: Timestamp, labels: LabelsArg
    ) -> None:
        """Same as mark() with every field given explicitly."""
        self._emit(messages.mark, name, value, timestamp=timestamp, labels=labels)

    def mark(
        self,
        name: str,
        value: str,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send a mark: an interesting moment, optionally with a string value.

        Marks travel at stat priority. They may be batched or delayed and are
        not acknowledged end to end. A mark can also carry string-valued
        stats such as "green", "yellow" or "red".
        """
        self.mark_full(name, value, timestamp, labels)

    def counter_full(
        self, name: str, value: int, timestamp: Timestamp, labels: LabelsArg
    ) -> None:
        """Same as counter() with every field given explicitly."""
        self._emit(messages.counter, name, value, timestamp=timestamp, labels=labels)

    def counter(
        self,
        name: str,
        value: int = 1,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send a counter delta. A value of 1 adds 1 to the counter."""
        self.counter_full(name, value, timestamp, labels)

    def gauge_full(
        self, name: str, value: float, timestamp: Timestamp, labels: LabelsArg
    ) -> None:
        """Same as gauge() with every field given explicitly."""
        self._emit(messages.gauge, name, value, timestamp=timestamp, labels=labels)

    def gauge(
        self,
        name: str,
        value: float,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send a gauge: an absolute value rather than a difference."""
        self.gauge_full(name, value, timestamp, labels)

    def event_full(
        self,
        name: str,
        subject: str,
        body: str,
        attn: Sequence[str],
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        """Same as event() with every field given explicitly."""
        self._emit(
            messages.event,
            name,
            subject,
            body,
            attn,
            timestamp=timestamp,
            labels=labels,
        )

    def event(
        self,
        name: str,
        subject: str = "",
        body: str = "",
        attn: Sequence[str] = (),
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send an event.

        Events are high priority and never buffered by the agent. They are
        acknowledged end to end, which makes them expensive to send, store
        and query.

        Args:
            name: Event name (e.g., "bad.log.line").
            subject: What happened this time. Truncated to 3072 characters.
            body: Further detail such as a stack trace. Truncated to 3072
                characters.
            attn: Who should care: logins, email addresses, team or
                component names.
        """
        self.event_full(name, subject, body, attn, timestamp, labels)

    def log_full(
        self, subject: str, data: JSONValue, timestamp: Timestamp, labels: LabelsArg
    ) -> None:
        """Same as log() with every field given explicitly."""
        self._emit(messages.log, subject, data, timestamp=timestamp, labels=labels)

    def log(
        self,
        subject: str,
        data: JSONValue = None,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send a low-priority log line.

        ``data`` must be JSON-representable. A severity can be included in
        it under the "severity" key.
        """
        self.log_full(subject, data, timestamp, labels)

    def register_process_full(
        self,
        name: str,
        data: Mapping[str, JSONValue],
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        """Same as register_process() with every field given explicitly."""
        self._emit(
            messages.register_process, name, data, timestamp=timestamp, labels=labels
        )

    def register_process(
        self,
        name: str | None = None,
        data: Mapping[str, JSONValue] | None = None,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Register this process with the agent.

        Tells the agent the process is running and that heartbeats should
        follow. ``name`` defaults to the resolved application name.
        """
        self.register_process_full(
            self.app_name if name is None else name, data or {}, timestamp, labels
        )

    def info_process_full(
        self,
        tag: str,
        data: Mapping[str, JSONValue],
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        """Same as info_process() with every field given explicitly."""
        self._emit(messages.info_process, tag, data, timestamp=timestamp, labels=labels)

    def info_process(
        self,
        tag: str,
        data: Mapping[str, JSONValue] | None = None,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send freeform information about this process.

        Suitable for deployment details, component versions or resource
        usage that is not graphed. Values that change constantly belong in
        a metric instead.
        """
        self.info_process_full(tag, data or {}, timestamp, labels)

    def info_agent_full(
        self,
        tag: str,
        data: Mapping[str, JSONValue],
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        """Same as info_agent() with every field given explicitly."""
        self._emit(messages.info_agent, tag, data, timestamp=timestamp, labels=labels)

    def info_agent(
        self,
        tag: str,
        data: Mapping[str, JSONValue] | None = None,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send freeform information about the host the agent runs on."""
        self.info_agent_full(tag, data or {}, timestamp, labels)

    def heartbeat_full(
        self,
        name: str,
        value: float,
        timeout: float,
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> None:
        """Same as heartbeat() with every field given explicitly."""
        self._emit(
            messages.heartbeat, name, value, timeout, timestamp=timestamp, labels=labels
        )

    def heartbeat(
        self,
        name: str = DEFAULT_HEARTBEAT_NAME,
        value: float = 0.0,
        timeout: float = 0.0,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> None:
        """Send a process heartbeat signalling that the process is alive."""
        self.heartbeat_full(name, value, timeout, timestamp, labels)

    # === Timing ===

    def time_callback_full(
        self,
        callback: Callable[[], T],
        name: str,
        timestamp: Timestamp,
        labels: LabelsArg,
    ) -> T:
        """Same as time_callback() with every field given explicitly."""
        start = time.perf_counter()
        result = callback()
        elapsed = time.perf_counter() - start
        self.gauge_full(name, elapsed, timestamp, labels)
        return result

    def time_callback(
        self,
        callback: Callable[[], T],
        name: str,
        *,
        timestamp: Timestamp = None,
        labels: LabelsArg = None,
    ) -> T:
        """Run ``callback`` and send its run time in seconds as a gauge.

        Returns:
            Whatever ``callback`` returned.
        """
        return self.time_callback_full(callback, name, timestamp, labels)

    def time_current(self, name: str, start: float) -> None:
        """Send the seconds since ``start`` (a perf_counter value) as a gauge."""
        self.gauge(name, time.perf_counter() - start)

    @contextmanager
    def timed(self, name: str, labels: LabelsArg = None) -> Iterator[None]:
        """Context manager that sends the block's run time as a gauge."""
        start = time.perf_counter()
        yield
        self.gauge(name, time.perf_counter() - start, labels=labels)

    # === Scheduling and lifecycle ===

    def every(
        self, interval: Interval | float, callback: Callable[[], object]
    ) -> ScheduledTask:
        """Run ``callback`` on a fixed interval, first after one full interval.

        Use this to report periodic statistics. The returned handle cancels
        the task.
        """
        return self._scheduler.every(interval, callback)

    def start(self) -> None:
        """Register the process and, if enabled, start periodic heartbeats."""
        if self.send_process_heartbeat:
            with self._lock:
                if self._heartbeat_task is None:
                    self._heartbeat_task = self.every(
                        self.config.heartbeat_interval,
                        lambda: self.heartbeat(PROCESS_HEARTBEAT_NAME),
                    )
        self.register_process()

    def stop(self) -> None:
        """Cancel the heartbeat started by start()."""
        with self._lock:
            task, self._heartbeat_task = self._heartbeat_task, None
        if task is not None:
            task.cancel()

    def close(self) -> None:
        """Stop periodic tasks and close the transport."""
        self.stop()
        self._scheduler.shutdown()
        with self._lock:
            transport = self._transport
        transport.close()

    def __enter__(self) -> "HasturClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HasturClient({self._udp_address!r}, {self._udp_port!r})"
