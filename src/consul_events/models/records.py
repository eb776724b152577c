"""Result types passed between the HTTP client and the watch loop."""

from __future__ import annotations

from dataclasses import dataclass, field

from consul_events.models.events import UserEvent


@dataclass
class FetchResult:
    """Outcome of one blocking /v1/event/list request."""

    events: list[UserEvent] = field(default_factory=list)  # payloads still encoded
    index: str | None = None  # raw X-Consul-Index header
