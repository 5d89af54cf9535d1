"""Builder functions for each Hastur message kind.

Builders are pure: they take the kind-specific fields, a timestamp and an
already merged label set, and return the wire mapping. Key order is
``type``, kind fields, ``timestamp``, ``labels``.

A numeric field or timestamp that cannot be represented raises EncodingError,
the same error the wire encoder raises.
"""

from collections.abc import Mapping, Sequence
from numbers import Real

from hastur.__about__ import __version__
from hastur.core.exceptions import EncodingError
from hastur.core.models import (
    EVENT_BODY_LIMIT,
    EVENT_SUBJECT_LIMIT,
    LANGUAGE,
    LOG_SUBJECT_LIMIT,
    JSONValue,
    Labels,
    Message,
    MessageType,
)
from hastur.core.timestamps import Timestamp, to_micros


def truncate(text: str, limit: int) -> str:
    """Return ``text`` cut down to at most ``limit`` characters."""
    return text if len(text) <= limit else text[:limit]


def _as_float(value: object, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise EncodingError(
            f"unsupported value: {field} must be a number, got {type(value).__name__}"
        )
    try:
        return float(value)
    except OverflowError as e:
        raise EncodingError(f"unsupported value: {field} out of float range") from e


def _message(
    kind: MessageType,
    fields: Mapping[str, JSONValue],
    timestamp: Timestamp,
    labels: Labels,
) -> Message:
    try:
        micros = to_micros(timestamp)
    except (TypeError, ValueError, OverflowError) as e:
        raise EncodingError(f"unsupported timestamp: {e}") from e
    return {
        "type": str(kind),
        **fields,
        "timestamp": micros,
        "labels": labels,
    }


def mark(name: str, value: str, timestamp: Timestamp, labels: Labels) -> Message:
    """Build a mark message.

    Args:
        name: Mark name (e.g., "deploy.finished")
        value: String value (e.g., "green")
        timestamp: Time of the mark
        labels: Merged label set

    Returns:
        Message with type "mark"
    """
    return _message(MessageType.MARK, {"name": name, "value": value}, timestamp, labels)


def counter(name: str, value: int, timestamp: Timestamp, labels: Labels) -> Message:
    """Build a counter message.

    Args:
        name: Counter name (e.g., "jobs.processed")
        value: Delta to apply to the counter
        timestamp: Time of the increment
        labels: Merged label set

    Returns:
        Message with type "counter"
    """
    return _message(
        MessageType.COUNTER, {"name": name, "value": value}, timestamp, labels
    )


def gauge(name: str, value: float, timestamp: Timestamp, labels: Labels) -> Message:
    """Build a gauge message.

    Args:
        name: Gauge name (e.g., "queue.depth")
        value: Absolute value
        timestamp: Time of the reading
        labels: Merged label set

    Returns:
        Message with type "gauge"
    """
    fields = {"name": name, "value": _as_float(value, "value")}
    return _message(MessageType.GAUGE, fields, timestamp, labels)


def event(
    name: str,
    subject: str,
    body: str,
    attn: Sequence[str],
    timestamp: Timestamp,
    labels: Labels,
) -> Message:
    """Build an event message.

    Subject and body are truncated to 3072 characters each.

    Args:
        name: Event name (e.g., "bad.log.line")
        subject: Short description of this occurrence
        body: Details such as a stack trace
        attn: Teams, people or components that should care
        timestamp: Time of the event
        labels: Merged label set

    Returns:
        Message with type "event"
    """
    fields: dict[str, JSONValue] = {
        "name": name,
        "subject": truncate(subject, EVENT_SUBJECT_LIMIT),
        "body": truncate(body, EVENT_BODY_LIMIT),
        "attn": list(attn),
    }
    return _message(MessageType.EVENT, fields, timestamp, labels)


def log(subject: str, data: JSONValue, timestamp: Timestamp, labels: Labels) -> Message:
    """Build a log message.

    Subject is truncated to 7168 characters.

    Args:
        subject: The log line
        data: Any JSON-representable payload
        timestamp: Time of the log line
        labels: Merged label set

    Returns:
        Message with type "log"
    """
    fields = {"subject": truncate(subject, LOG_SUBJECT_LIMIT), "data": data}
    return _message(MessageType.LOG, fields, timestamp, labels)


def register_process(
    name: str,
    data: Mapping[str, JSONValue],
    timestamp: Timestamp,
    labels: Labels,
) -> Message:
    """Build a process registration message.

    The nested ``data`` starts from ``name``, ``language`` and ``version``;
    caller data is overlaid afterwards and may replace any of them.
    """
    all_data: dict[str, JSONValue] = {
        "name": name,
        "language": LANGUAGE,
        "version": __version__,
    }
    all_data.update(data)
    return _message(MessageType.REG_PROCESS, {"data": all_data}, timestamp, labels)


def info_process(
    tag: str, data: Mapping[str, JSONValue], timestamp: Timestamp, labels: Labels
) -> Message:
    """Build a freeform process information message."""
    fields = {"tag": tag, "data": dict(data)}
    return _message(MessageType.INFO_PROCESS, fields, timestamp, labels)


def info_agent(
    tag: str, data: Mapping[str, JSONValue], timestamp: Timestamp, labels: Labels
) -> Message:
    """Build a freeform agent/host information message."""
    fields = {"tag": tag, "data": dict(data)}
    return _message(MessageType.INFO_AGENT, fields, timestamp, labels)


def heartbeat(
    name: str,
    value: float,
    timeout: float,
    timestamp: Timestamp,
    labels: Labels,
) -> Message:
    """Build a process heartbeat message."""
    fields = {
        "name": name,
        "value": _as_float(value, "value"),
        "timeout": _as_float(timeout, "timeout"),
    }
    return _message(MessageType.HB_PROCESS, fields, timestamp, labels)
