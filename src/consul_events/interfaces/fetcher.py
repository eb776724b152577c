"""EventFetcher protocol - one blocking query against the event list."""

from __future__ import annotations

from typing import Protocol

from consul_events.models.records import FetchResult


class EventFetcher(Protocol):
    """Issues blocking queries against /v1/event/list."""

    async def list_events(
        self,
        name: str | None = None,
        index: str | None = None,
        wait: str | None = None,
    ) -> FetchResult:
        """Block until the index moves past `index` or the wait elapses.

        `wait` defaults to the fetcher's configured server wait.

        Raises FetchTimeout, TransportError or MalformedResponseError for
        failures the caller may retry, RequestRejected otherwise.
        """
        ...
