"""EventAPI - fire, list and watch user events."""

from __future__ import annotations

import logging

from consul_events.agent.client import ConsulHTTPClient
from consul_events.models.events import UserEvent, validate_name
from consul_events.watch.clock import decode_event
from consul_events.watch.session import EventWatch

log = logging.getLogger(__name__)


class EventAPI:
    """User event operations on a Consul agent."""

    def __init__(self, client: ConsulHTTPClient) -> None:
        self._client = client

    async def fire(
        self,
        name: str,
        payload: str | bytes | None = None,
        node: str | None = None,
        service: str | None = None,
        tag: str | None = None,
    ) -> UserEvent:
        """Fire a new user event.

        The returned event carries the payload decoded back to the type that
        was sent (bytes in, bytes out; otherwise str).
        """
        validate_name(name, required=True)
        as_bytes = isinstance(payload, bytes)
        body = payload.encode("utf-8") if isinstance(payload, str) else payload
        event = await self._client.fire_event(
            name, body, node=node, service=service, tag=tag,
        )
        return decode_event(event, as_bytes=as_bytes)

    async def list(self, name: str | None = None, decode_payload: bool = True) -> list[UserEvent]:
        """List the most recent events the agent has seen."""
        validate_name(name)
        result = await self._client.list_events(name=name)
        if not decode_payload:
            return result.events
        return [decode_event(e) for e in result.events]

    def watch(self, name: str | None = None, decode_payload: bool = True) -> EventWatch:
        """Start watching for new events. Call from within a running event loop."""
        cfg = self._client.config
        return EventWatch(
            self._client,
            name=name,
            decode_payload=decode_payload,
            retry=cfg.retry,
            max_pending=cfg.max_pending,
        ).start()
