"""Transport adapters for delivering encoded messages."""

from hastur.adapters.transport.in_memory import InMemoryTransport
from hastur.adapters.transport.udp import UDPTransport

__all__ = [
    "InMemoryTransport",
    "UDPTransport",
]
