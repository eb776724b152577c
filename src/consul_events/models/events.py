"""Event models: agent user events and the client-side watch session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from consul_events.errors import ConfigurationError

# Index value sent before the agent has handed out a real cursor
UNSET_INDEX = "0"


def validate_name(name: object, required: bool = False) -> str | None:
    """Check an event name before it goes into a path or query string."""
    if name is None:
        if required:
            raise ConfigurationError("name required")
        return None
    if not isinstance(name, str):
        raise ConfigurationError(f"event name must be a string, got {type(name).__name__}")
    if not name:
        raise ConfigurationError("name required" if required else "event name must not be empty")
    if "/" in name or any(ch.isspace() for ch in name):
        raise ConfigurationError(f"invalid event name: {name!r}")
    return name


@dataclass(frozen=True)
class UserEvent:
    """A user event as reported by the agent's /v1/event endpoints."""

    id: str
    name: str
    payload: str | bytes | None  # base64 until decoded
    node_filter: str = ""
    service_filter: str = ""
    tag_filter: str = ""
    version: int = 1
    ltime: int = 0  # Lamport time assigned by the agent

    @classmethod
    def from_api(cls, record: dict[str, Any]) -> UserEvent:
        """Build an event from the agent's JSON record.

        Raises KeyError, TypeError or ValueError for malformed records.
        """
        ltime = record["LTime"]
        if isinstance(ltime, bool) or not isinstance(ltime, int) or ltime < 0:
            raise ValueError(f"invalid LTime: {ltime!r}")
        name = record["Name"]
        if not isinstance(name, str):
            raise TypeError(f"invalid Name: {name!r}")
        return cls(
            id=str(record.get("ID", "")),
            name=name,
            payload=record.get("Payload"),
            node_filter=record.get("NodeFilter") or "",
            service_filter=record.get("ServiceFilter") or "",
            tag_filter=record.get("TagFilter") or "",
            version=int(record.get("Version", 1)),
            ltime=ltime,
        )

    def to_dict(self) -> dict[str, Any]:
        payload = self.payload
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")
        return {
            "ID": self.id,
            "Name": self.name,
            "Payload": payload,
            "NodeFilter": self.node_filter,
            "ServiceFilter": self.service_filter,
            "TagFilter": self.tag_filter,
            "Version": self.version,
            "LTime": self.ltime,
        }


class WatchState(str, Enum):
    """Lifecycle of a watch session."""

    BOOTSTRAPPING = "bootstrapping"  # first fetch pending, nothing emitted yet
    STREAMING = "streaming"
    STOPPED = "stopped"


@dataclass
class WatchSession:
    """State carried across iterations of one event watch."""

    filter_name: str | None = None
    decode_payload: bool = True
    cursor: str = UNSET_INDEX
    clock_watermark: int = 0
    state: WatchState = WatchState.BOOTSTRAPPING
    consecutive_failures: int = field(default=0, compare=False)
