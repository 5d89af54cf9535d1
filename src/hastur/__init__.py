"""Hastur client for Python.

Publishes marks, counters, gauges, events, logs, process registration and
information, and heartbeats to the local Hastur agent as JSON datagrams.
"""

from hastur.__about__ import __version__
from hastur.adapters.frameworks.asgi import HasturMiddleware
from hastur.adapters.logging import HasturHandler
from hastur.adapters.scheduler import ThreadScheduler
from hastur.adapters.transport import InMemoryTransport, UDPTransport
from hastur.client import HasturClient
from hastur.config import ClientConfig
from hastur.core.exceptions import ConfigurationError, EncodingError, HasturError
from hastur.core.labels import LabelResolver
from hastur.core.models import Interval, MessageType
from hastur.core.timestamps import from_micros, to_micros

__all__ = [
    "ClientConfig",
    "ConfigurationError",
    "EncodingError",
    "HasturClient",
    "HasturError",
    "HasturHandler",
    "HasturMiddleware",
    "InMemoryTransport",
    "Interval",
    "LabelResolver",
    "MessageType",
    "ThreadScheduler",
    "UDPTransport",
    "__version__",
    "from_micros",
    "to_micros",
]
