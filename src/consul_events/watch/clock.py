"""Logical clock filter - decides which fetched events are new.

The agent's index only says that *something* changed; every blocking query
returns the agent's whole recent event buffer. LTime is the only key that
tells already-delivered events apart from new ones.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import logging
from typing import Sequence

from consul_events.models.events import UserEvent, WatchSession, WatchState

log = logging.getLogger(__name__)


def decode_payload(value: str | bytes | None, as_bytes: bool = False) -> str | bytes | None:
    """Decode a base64 payload to text (UTF-8) or raw bytes."""
    if value is None:
        return None
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        log.warning("Payload is not valid base64, passing it through unchanged")
        return value
    if as_bytes:
        return raw
    return raw.decode("utf-8", errors="replace")


def decode_event(event: UserEvent, as_bytes: bool = False) -> UserEvent:
    return dataclasses.replace(event, payload=decode_payload(event.payload, as_bytes))


def advance(session: WatchSession, events: Sequence[UserEvent]) -> list[UserEvent]:
    """Feed one fetch worth of events through the session's clock.

    While bootstrapping, everything the agent already holds is old: only the
    watermark is established and nothing is returned. Afterwards, events are
    returned in server order when their LTime is above the watermark.
    """
    if session.state is WatchState.STOPPED:
        return []

    if session.state is WatchState.BOOTSTRAPPING:
        for event in events:
            if event.ltime > session.clock_watermark:
                session.clock_watermark = event.ltime
        session.state = WatchState.STREAMING
        log.debug(
            "Bootstrapped watch on %s: %d existing events, watermark %d",
            session.filter_name or "(all)", len(events), session.clock_watermark,
        )
        return []

    fresh: list[UserEvent] = []
    for event in events:
        if event.ltime <= session.clock_watermark:
            continue
        if session.decode_payload:
            event = decode_event(event)
        session.clock_watermark = event.ltime
        fresh.append(event)

    if len(fresh) < len(events):
        log.debug(
            "Dropped %d already-seen events (watermark %d)",
            len(events) - len(fresh), session.clock_watermark,
        )
    return fresh
