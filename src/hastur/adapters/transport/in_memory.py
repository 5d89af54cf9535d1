"""In-memory transport adapter."""

from hastur.core.encoding import decode_message
from hastur.core.models import Message


class InMemoryTransport:
    """In-memory implementation of TransportPort.

    Stores every payload in a list instead of sending it. Suitable for
    testing and dry runs where no agent is listening.
    """

    def __init__(self, address: str = "127.0.0.1", port: int = 8125) -> None:
        self.address = address
        self.port = port
        self.payloads: list[bytes] = []
        self.closed = False

    def send(self, payload: bytes) -> None:
        """Record the payload unless the transport has been closed."""
        if not self.closed:
            self.payloads.append(payload)

    def close(self) -> None:
        self.closed = True

    def messages(self) -> list[Message]:
        """Decode every recorded payload, oldest first."""
        return [decode_message(payload) for payload in self.payloads]

    def clear(self) -> None:
        self.payloads.clear()
