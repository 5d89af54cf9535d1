"""Core domain types for Hastur messages."""

from enum import Enum, StrEnum

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

Labels = dict[str, JSONValue]
Message = dict[str, JSONValue]

EVENT_SUBJECT_LIMIT = 3072
EVENT_BODY_LIMIT = 3072
LOG_SUBJECT_LIMIT = 7168

DEFAULT_UDP_ADDRESS = "127.0.0.1"
DEFAULT_UDP_PORT = 8125

APP_NAME_ENV = "HASTUR_APP_NAME"
DEFAULT_HEARTBEAT_NAME = "application.heartbeat"
PROCESS_HEARTBEAT_NAME = "process_heartbeat"
LANGUAGE = "python"


class MessageType(StrEnum):
    """Wire tag carried in the ``type`` field of every message."""

    MARK = "mark"
    COUNTER = "counter"
    GAUGE = "gauge"
    EVENT = "event"
    LOG = "log"
    REG_PROCESS = "reg_process"
    INFO_PROCESS = "info_process"
    INFO_AGENT = "info_agent"
    HB_PROCESS = "hb_process"


class Interval(Enum):
    """Fixed periods accepted by the periodic scheduler.

    Attributes:
        FIVE_SECS: Every five seconds.
        MINUTE: Every minute.
        HOUR: Every hour.
        DAY: Every 24 hours.
    """

    FIVE_SECS = 5
    MINUTE = 60
    HOUR = 3600
    DAY = 86400

    @property
    def seconds(self) -> float:
        return float(self.value)
