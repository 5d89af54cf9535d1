"""Port interfaces for the client's outside collaborators.

The client depends only on these protocols; concrete adapters live under
``hastur.adapters``.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from hastur.core.models import Interval


@runtime_checkable
class TransportPort(Protocol):
    """Port for writing encoded messages to the agent.

    Examples: UDPTransport, InMemoryTransport.
    """

    def send(self, payload: bytes) -> None:
        """Write one datagram. Write failures are swallowed, never raised."""
        ...

    def close(self) -> None:
        """Release the underlying channel."""
        ...


TransportFactory = Callable[[str, int], TransportPort]
"""Builds a transport for ``(address, port)``; raises ConfigurationError."""


@runtime_checkable
class ScheduledTask(Protocol):
    """Handle for a repeating callback."""

    @property
    def active(self) -> bool:
        """True until the task is cancelled."""
        ...

    def cancel(self) -> None:
        """Stop invoking the callback. Safe to call more than once."""
        ...


@runtime_checkable
class SchedulerPort(Protocol):
    """Port for running callbacks on a fixed period."""

    def every(
        self, interval: Interval | float, callback: Callable[[], object]
    ) -> ScheduledTask:
        """Invoke ``callback`` once per interval, first after one full interval."""
        ...

    def shutdown(self) -> None:
        """Cancel every task started by this scheduler."""
        ...
