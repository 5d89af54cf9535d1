"""Client configuration.

Environment variables read by ``ClientConfig.from_env``:
    HASTUR_UDP_ADDRESS: agent host (default: 127.0.0.1)
    HASTUR_UDP_PORT: agent port (default: 8125)
    HASTUR_SEND_HEARTBEAT: start periodic heartbeats in start() (default: true)

``HASTUR_APP_NAME`` is not read here: the application name is resolved
each time a message is built.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from hastur.core.models import (
    DEFAULT_UDP_ADDRESS,
    DEFAULT_UDP_PORT,
    Interval,
    JSONValue,
)

_TRUTHY = frozenset({"1", "true", "t", "yes", "y", "on"})


@dataclass(frozen=True)
class ClientConfig:
    """Initial settings for a HasturClient.

    Attributes:
        udp_address: Host of the local agent.
        udp_port: UDP port of the local agent.
        app_name: Explicit application name. Empty means unset.
        send_process_heartbeat: Whether start() schedules heartbeats.
        heartbeat_interval: Period of the heartbeat started by start().
        default_labels: Labels attached to every message.
    """

    udp_address: str = DEFAULT_UDP_ADDRESS
    udp_port: int = DEFAULT_UDP_PORT
    app_name: str = ""
    send_process_heartbeat: bool = True
    heartbeat_interval: Interval = Interval.MINUTE
    default_labels: Mapping[str, JSONValue] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        defaults: "ClientConfig | None" = None,
    ) -> "ClientConfig":
        """Build a configuration from environment variables.

        Unset variables keep the value from ``defaults``.

        Raises:
            ValueError: If HASTUR_UDP_PORT is not an integer.
        """
        env = os.environ if environ is None else environ
        base = defaults or cls()
        changes: dict[str, object] = {}

        address = env.get("HASTUR_UDP_ADDRESS", "").strip()
        if address:
            changes["udp_address"] = address

        port = env.get("HASTUR_UDP_PORT", "").strip()
        if port:
            try:
                changes["udp_port"] = int(port)
            except ValueError as e:
                raise ValueError(f"HASTUR_UDP_PORT must be an integer: {port!r}") from e

        heartbeat = env.get("HASTUR_SEND_HEARTBEAT")
        if heartbeat is not None:
            changes["send_process_heartbeat"] = heartbeat.strip().lower() in _TRUTHY

        return replace(base, **changes)
