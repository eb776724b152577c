"""Data models for consul_events."""

from consul_events.models.events import (
    UNSET_INDEX,
    UserEvent,
    WatchSession,
    WatchState,
    validate_name,
)
from consul_events.models.records import FetchResult
from consul_events.models.config import ClientConfig, RetryConfig, parse_wait

__all__ = [
    "UNSET_INDEX", "UserEvent", "WatchSession", "WatchState", "validate_name",
    "FetchResult",
    "ClientConfig", "RetryConfig", "parse_wait",
]
