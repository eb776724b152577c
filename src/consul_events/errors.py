"""Exception types raised by the client and the watch loop."""

from __future__ import annotations


class ConsulEventsError(RuntimeError):
    """Base class for all consul_events errors."""


class ConfigurationError(ConsulEventsError, ValueError):
    """Invalid caller input or configuration. Raised before any request."""


class FetchError(ConsulEventsError):
    """A blocking fetch failed in a way the watch loop retries."""


class FetchTimeout(FetchError):
    """The client-side timeout elapsed before the agent answered."""


class TransportError(FetchError):
    """Connection failure or server-side (5xx) error."""


class MalformedResponseError(FetchError):
    """The agent answered but the response could not be interpreted."""


class RequestRejected(ConsulEventsError):
    """The agent refused the request (4xx). Retrying will not help."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
