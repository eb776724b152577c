"""Protocol interfaces for consul_events components."""

from consul_events.interfaces.fetcher import EventFetcher

__all__ = ["EventFetcher"]
