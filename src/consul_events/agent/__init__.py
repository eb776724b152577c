"""Consul agent HTTP access."""

from consul_events.agent.api import EventAPI
from consul_events.agent.client import INDEX_HEADER, ConsulHTTPClient

__all__ = ["EventAPI", "INDEX_HEADER", "ConsulHTTPClient"]
