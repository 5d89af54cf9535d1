"""Shared test fixtures for all test modules."""

from collections.abc import Callable, Iterator

import pytest

from hastur.client import HasturClient
from hastur.config import ClientConfig
from hastur.core.labels import LabelResolver
from hastur.core.models import Message
from tests.helpers import RecordingScheduler, TransportRecorder


@pytest.fixture
def environ() -> dict[str, str]:
    """Isolated environment mapping for app name resolution."""
    return {}


@pytest.fixture
def transports() -> TransportRecorder:
    return TransportRecorder()


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def client(
    transports: TransportRecorder,
    scheduler: RecordingScheduler,
    environ: dict[str, str],
) -> Iterator[HasturClient]:
    """Client named "test.app" writing to an in-memory transport."""
    resolver = LabelResolver(app_name="test.app", environ=environ)
    hastur = HasturClient(
        ClientConfig(udp_port=8126),
        transport_factory=transports,
        scheduler=scheduler,
        resolver=resolver,
    )
    yield hastur
    hastur.close()


@pytest.fixture
def sent(transports: TransportRecorder) -> Callable[[], list[Message]]:
    """Return a callable decoding every message sent so far."""

    def _sent() -> list[Message]:
        return [m for t in transports.built for m in t.messages()]

    return _sent


@pytest.fixture
def one_message(sent: Callable[[], list[Message]]) -> Callable[[], Message]:
    """Return a callable asserting exactly one message was sent."""

    def _one() -> Message:
        messages = sent()
        assert len(messages) == 1, messages
        return messages[0]

    return _one
