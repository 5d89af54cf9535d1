"""UDP transport adapter.

Each message is written as a single datagram on a connected socket. The
transport is fire-and-forget: write failures are logged at debug level and
dropped.
"""

import logging
import socket
import threading

from hastur.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class UDPTransport:
    """UDP implementation of TransportPort.

    Args:
        address: Host name or IP address of the agent.
        port: UDP port of the agent.

    Raises:
        ConfigurationError: If the address cannot be resolved or the socket
            cannot be connected.
    """

    def __init__(self, address: str, port: int) -> None:
        self.address = address
        self.port = port
        self._lock = threading.Lock()
        self._sock: socket.socket | None = self._connect(address, port)

    @staticmethod
    def _connect(address: str, port: int) -> socket.socket:
        if isinstance(port, bool) or not isinstance(port, int):
            raise ConfigurationError(f"Invalid UDP port: {port!r}")
        if not 0 < port < 65536:
            raise ConfigurationError(f"Invalid UDP port: {port!r}")
        try:
            infos = socket.getaddrinfo(address, port, type=socket.SOCK_DGRAM)
        except (OSError, UnicodeError) as e:
            raise ConfigurationError(
                f"Cannot resolve UDP destination {address}:{port}: {e}"
            ) from e

        last_error: OSError | None = None
        for family, sock_type, proto, _, sockaddr in infos:
            try:
                sock = socket.socket(family, sock_type, proto)
            except OSError as e:
                last_error = e
                continue
            try:
                sock.connect(sockaddr)
            except OSError as e:
                sock.close()
                last_error = e
                continue
            return sock
        raise ConfigurationError(
            f"Cannot connect to UDP destination {address}:{port}: {last_error}"
        )

    def send(self, payload: bytes) -> None:
        """Write one datagram, ignoring any transport error."""
        with self._lock:
            sock = self._sock
        if sock is None:
            logger.debug("Dropping %d byte message: transport closed", len(payload))
            return
        try:
            sock.send(payload)
        except OSError as e:
            logger.debug("Dropping %d byte message: %s", len(payload), e)

    def close(self) -> None:
        """Close the socket. Further sends are dropped."""
        with self._lock:
            sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def __repr__(self) -> str:
        return f"UDPTransport({self.address!r}, {self.port!r})"
