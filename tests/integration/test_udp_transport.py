"""Integration tests for UDPTransport against a real local socket."""

import json
import os
import socket
from collections.abc import Iterator

import pytest

from hastur.adapters.transport.udp import UDPTransport
from hastur.client import HasturClient
from hastur.config import ClientConfig
from hastur.core.exceptions import ConfigurationError
from hastur.core.ports import TransportPort
from tests.helpers import RecordingScheduler

pytestmark = [
    pytest.mark.integration,
    pytest.mark.tier(2),
    pytest.mark.tra("Adapter.Transport.UDP"),
]


@pytest.fixture
def listener() -> Iterator[socket.socket]:
    """UDP socket bound to an ephemeral localhost port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2)
    yield sock
    sock.close()


def _port(sock: socket.socket) -> int:
    port: int = sock.getsockname()[1]
    return port


class TestUDPTransport:
    def test_implements_port(self, listener: socket.socket) -> None:
        transport = UDPTransport("127.0.0.1", _port(listener))
        assert isinstance(transport, TransportPort)
        transport.close()

    def test_sends_single_datagram(self, listener: socket.socket) -> None:
        transport = UDPTransport("127.0.0.1", _port(listener))
        transport.send(b'{"type":"mark"}')
        data, _ = listener.recvfrom(65535)
        assert data == b'{"type":"mark"}'
        transport.close()

    def test_resolves_host_names(self, listener: socket.socket) -> None:
        transport = UDPTransport("localhost", _port(listener))
        transport.send(b"ping")
        transport.close()

    def test_send_after_close_is_dropped(self, listener: socket.socket) -> None:
        transport = UDPTransport("127.0.0.1", _port(listener))
        transport.close()
        transport.close()
        transport.send(b"ignored")

    def test_oversized_datagram_is_dropped(self, listener: socket.socket) -> None:
        transport = UDPTransport("127.0.0.1", _port(listener))
        transport.send(b"x" * 70000)
        transport.close()

    def test_unresolvable_host(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot resolve"):
            UDPTransport("host.invalid.", 8125)

    def test_socket_creation_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Running out of descriptors is reported as a configuration error."""

        def _no_sockets(*args: object) -> socket.socket:
            raise OSError(24, "Too many open files")

        monkeypatch.setattr(socket, "socket", _no_sockets)
        with pytest.raises(ConfigurationError, match="Too many open files"):
            UDPTransport("127.0.0.1", 8125)

    @pytest.mark.parametrize("port", [0, -1, 65536, "8125"])
    def test_invalid_port(self, port: object) -> None:
        with pytest.raises(ConfigurationError, match="Invalid UDP port"):
            UDPTransport("127.0.0.1", port)  # type: ignore[arg-type]


class TestClientOverUDP:
    def test_mark_reaches_listener(self, listener: socket.socket) -> None:
        client = HasturClient(
            ClientConfig(udp_port=_port(listener), app_name="test.app"),
            scheduler=RecordingScheduler(),
        )
        try:
            client.mark("test.mark", "baz", labels={"label1": "value1"})
            data, _ = listener.recvfrom(65535)
        finally:
            client.close()
        message = json.loads(data)
        assert message["type"] == "mark"
        assert message["name"] == "test.mark"
        assert message["labels"] == {
            "label1": "value1",
            "pid": os.getpid(),
            "app": "test.app",
        }

    def test_set_udp_port_redirects(self, listener: socket.socket) -> None:
        client = HasturClient(scheduler=RecordingScheduler())
        try:
            client.set_udp_port(_port(listener))
            client.counter("test.counter", 10)
            data, _ = listener.recvfrom(65535)
        finally:
            client.close()
        assert json.loads(data)["value"] == 10

    def test_bad_address_raises_at_setter(self) -> None:
        client = HasturClient(scheduler=RecordingScheduler())
        try:
            with pytest.raises(ConfigurationError):
                client.set_udp_address("host.invalid.")
            assert client.udp_address == "127.0.0.1"
        finally:
            client.close()

    def test_no_listener_does_not_raise(self) -> None:
        """Writes to a closed port are silently dropped."""
        spare = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        spare.bind(("127.0.0.1", 0))
        port = _port(spare)
        spare.close()
        client = HasturClient(ClientConfig(udp_port=port), scheduler=RecordingScheduler())
        try:
            for _ in range(3):
                client.gauge("g", 1.0)
        finally:
            client.close()
