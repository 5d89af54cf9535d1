"""Python logging handler adapter for Hastur.

This adapter bridges Python's standard library logging module to the
Hastur client, sending each log record as a Hastur ``log`` message.
"""

import logging
import traceback
from typing import TYPE_CHECKING

from hastur.core.models import JSONValue

if TYPE_CHECKING:
    from hastur.client import HasturClient

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# Default attributes to extract from LogRecord
_DEFAULT_INCLUDE_ATTRS = ["logger", "module", "funcName", "lineno", "pathname"]

# Records from the client's own loggers would loop back into the client
_OWN_LOGGER_PREFIX = "hastur"


class HasturHandler(logging.Handler):
    """Logging handler that sends log records to Hastur as log messages.

    The record's formatted message becomes the subject; severity, source
    location, ``extra`` fields and exception details go into ``data``.

    Example:
        ```python
        from hastur import HasturClient, HasturHandler

        client = HasturClient()
        logging.getLogger().addHandler(HasturHandler(client))
        ```
    """

    def __init__(
        self,
        client: "HasturClient",
        include_attrs: list[str] | None = None,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler with a Hastur client.

        Args:
            client: Client used to send the log messages.
            include_attrs: List of LogRecord attributes to include. Defaults to
                ["logger", "module", "funcName", "lineno", "pathname"].
            level: Minimum level handled.
        """
        super().__init__(level)
        self._client = client
        self._include_attrs = include_attrs or _DEFAULT_INCLUDE_ATTRS

    def _is_own_record(self, record: logging.LogRecord) -> bool:
        return record.name == _OWN_LOGGER_PREFIX or record.name.startswith(
            _OWN_LOGGER_PREFIX + "."
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Send a log record to Hastur.

        Args:
            record: The log record to emit.
        """
        if self._is_own_record(record):
            return
        try:
            subject = self.format(record) if self.formatter else record.getMessage()
        except Exception:
            self.handleError(record)
            return

        attr_mapping: dict[str, JSONValue] = {
            "logger": record.name,
            "module": record.module,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
            "pathname": record.pathname,
        }
        data: dict[str, JSONValue] = {"severity": record.levelname.lower()}
        data.update(
            {key: attr_mapping[key] for key in self._include_attrs if key in attr_mapping}
        )

        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                data[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                data["exc_type"] = exc_type.__name__
            if exc_value is not None:
                data["exc_message"] = str(exc_value)
            if exc_tb is not None:
                data["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        self._client.log(subject, data, timestamp=record.created)
