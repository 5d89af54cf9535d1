"""Test doubles and assertion helpers shared by test modules."""

import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from hastur.adapters.transport.in_memory import InMemoryTransport
from hastur.core.models import Interval


@dataclass
class RecordedTask:
    """ScheduledTask stand-in that never runs on its own."""

    interval: Interval | float
    callback: Callable[[], object]
    active: bool = True

    def cancel(self) -> None:
        self.active = False

    def fire(self) -> None:
        self.callback()


@dataclass
class RecordingScheduler:
    """SchedulerPort stand-in that records tasks instead of starting threads."""

    tasks: list[RecordedTask] = field(default_factory=list)
    shut_down: bool = False

    def every(
        self, interval: Interval | float, callback: Callable[[], object]
    ) -> RecordedTask:
        task = RecordedTask(interval, callback)
        self.tasks.append(task)
        return task

    def shutdown(self) -> None:
        self.shut_down = True
        for task in self.tasks:
            task.cancel()


@dataclass
class TransportRecorder:
    """Transport factory that keeps every InMemoryTransport it builds."""

    built: list[InMemoryTransport] = field(default_factory=list)

    def __call__(self, address: str, port: int) -> InMemoryTransport:
        transport = InMemoryTransport(address, port)
        self.built.append(transport)
        return transport

    @property
    def current(self) -> InMemoryTransport:
        return self.built[-1]


def assert_common_labels(message: Any, app: str = "test.app") -> None:
    """Check the reserved labels every message carries."""
    labels = message["labels"]
    assert labels["app"] == app
    assert labels["pid"] == os.getpid()


def assert_current_timestamp(message: Any) -> None:
    """Check the timestamp is integer microseconds within a second of now."""
    timestamp = message["timestamp"]
    assert isinstance(timestamp, int)
    assert abs(timestamp / 1_000_000 - time.time()) < 1
