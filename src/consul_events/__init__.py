"""consul_events - client for Consul user events with a blocking-query watch."""

from consul_events.agent import ConsulHTTPClient, EventAPI
from consul_events.errors import (
    ConfigurationError,
    ConsulEventsError,
    FetchError,
    FetchTimeout,
    MalformedResponseError,
    RequestRejected,
    TransportError,
)
from consul_events.models import ClientConfig, RetryConfig, UserEvent, WatchSession, WatchState
from consul_events.watch import EventWatch, start_watch

__version__ = "0.1.0"

__all__ = [
    "ConsulHTTPClient", "EventAPI",
    "ConsulEventsError", "ConfigurationError", "FetchError", "FetchTimeout",
    "MalformedResponseError", "RequestRejected", "TransportError",
    "ClientConfig", "RetryConfig", "UserEvent", "WatchSession", "WatchState",
    "EventWatch", "start_watch",
]
