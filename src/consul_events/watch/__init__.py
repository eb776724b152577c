"""Blocking-query event watch."""

from consul_events.watch.clock import advance, decode_event, decode_payload
from consul_events.watch.cursor import normalize_index
from consul_events.watch.session import DEFAULT_MAX_PENDING, EventWatch, start_watch

__all__ = [
    "advance", "decode_event", "decode_payload",
    "normalize_index",
    "DEFAULT_MAX_PENDING", "EventWatch", "start_watch",
]
