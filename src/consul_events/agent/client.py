"""Consul agent HTTP client - blocking event list queries and event fire."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from consul_events.errors import (
    ConfigurationError,
    FetchTimeout,
    MalformedResponseError,
    RequestRejected,
    TransportError,
)
from consul_events.models.config import ClientConfig, parse_wait
from consul_events.models.events import UserEvent
from consul_events.models.records import FetchResult

log = logging.getLogger(__name__)

INDEX_HEADER = "X-Consul-Index"
TOKEN_HEADER = "X-Consul-Token"


def _parse_events(body: Any) -> list[UserEvent]:
    if not isinstance(body, list):
        raise MalformedResponseError(f"expected a JSON list, got {type(body).__name__}")
    events: list[UserEvent] = []
    for record in body:
        if not isinstance(record, dict):
            raise MalformedResponseError(f"expected an event object, got {record!r}")
        try:
            events.append(UserEvent.from_api(record))
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"bad event record: {exc}") from exc
    return events


class ConsulHTTPClient:
    """Talks to a local Consul agent over its HTTP API.

    One httpx.AsyncClient (and so one connection pool) is shared by every
    request and every watch built on this client. It is created on first use
    and released by close(). `transport` replaces the network transport
    (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        cfg: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cfg = cfg or ClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {}
            if self._cfg.token:
                headers[TOKEN_HEADER] = self._cfg.token
            self._client = httpx.AsyncClient(
                base_url=f"{self._cfg.base_url}/v1",
                headers=headers,
                timeout=httpx.Timeout(self._cfg.request_timeout, connect=10),
                transport=self._transport,
            )
        return self._client

    def _params(self, **query: Any) -> dict[str, Any]:
        params = {k: v for k, v in query.items() if v is not None}
        if self._cfg.datacenter:
            params["dc"] = self._cfg.datacenter
        return params

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any],
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"params": params}
        if content is not None:
            kwargs["content"] = content
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout, connect=10)
        try:
            resp = await self._http().request(method, path, **kwargs)
        except httpx.ReadTimeout as exc:
            raise FetchTimeout(f"{method} {path} timed out") from exc
        except httpx.TimeoutException as exc:
            # connect, write or pool timeout: the agent is not reachable
            raise TransportError(f"{method} {path} failed: {type(exc).__name__}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code >= 500:
            raise TransportError(f"{method} {path}: HTTP {resp.status_code} {resp.text[:200]}")
        if resp.status_code >= 400:
            raise RequestRejected(resp.status_code, resp.text[:200] or resp.reason_phrase)
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedResponseError(f"response is not JSON: {exc}") from exc

    async def list_events(
        self,
        name: str | None = None,
        index: str | None = None,
        wait: str | None = None,
    ) -> FetchResult:
        """GET /v1/event/list, as a blocking query when `index` is given."""
        timeout = None
        if index is not None:
            if wait is None:
                wait = self._cfg.wait
            elif parse_wait(wait) <= self._cfg.request_timeout:
                raise ConfigurationError(
                    f"wait {wait!r} must be longer than the request timeout "
                    f"({self._cfg.request_timeout}s)"
                )
            timeout = self._cfg.request_timeout
        params = self._params(name=name, index=index, wait=wait if index is not None else None)

        resp = await self._send("GET", "/event/list", params=params, timeout=timeout)
        events = _parse_events(self._json(resp))
        result = FetchResult(events=events, index=resp.headers.get(INDEX_HEADER))
        log.debug("Listed %d events (index: %s)", len(events), result.index)
        return result

    async def fire_event(
        self,
        name: str,
        payload: bytes | None = None,
        node: str | None = None,
        service: str | None = None,
        tag: str | None = None,
    ) -> UserEvent:
        """PUT /v1/event/fire/{name}. Returns the event with its payload still encoded."""
        params = self._params(node=node, service=service, tag=tag)
        resp = await self._send("PUT", f"/event/fire/{name}", params=params, content=payload)
        body = self._json(resp)
        if not isinstance(body, dict):
            raise MalformedResponseError(f"expected an event object, got {body!r}")
        try:
            event = UserEvent.from_api(body)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedResponseError(f"bad event record: {exc}") from exc
        log.info("Fired event %s (id: %s)", event.name, event.id)
        return event

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ConsulHTTPClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
