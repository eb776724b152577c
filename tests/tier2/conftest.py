"""Tier 2 fixtures: in-process fake Consul agent served over real HTTP."""

from __future__ import annotations

import asyncio
import base64
import uuid

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from consul_events.agent.client import ConsulHTTPClient
from consul_events.models.config import parse_wait
from tests.conftest import make_test_config


class FakeAgent:
    """Minimal /v1/event implementation with blocking-query semantics."""

    def __init__(self) -> None:
        self.address = ""
        self.index = 1
        self.ltime = 0
        self.events: list[dict] = []
        self.requests: list[dict] = []
        self.fail_next: list[int] = []  # HTTP statuses to answer with
        self.hang_next = 0  # blocking queries to hold for the full wait
        self.raw_next: list[str] = []  # bodies to send instead of the event list
        self.compound_index = False
        self._changed = asyncio.Event()

    def add_event(self, name: str, payload: bytes | None = None, **filters: str) -> dict:
        self.ltime += 1
        self.index += 1
        record = {
            "ID": str(uuid.uuid4()),
            "Name": name,
            "Payload": base64.b64encode(payload).decode("ascii") if payload else None,
            "NodeFilter": filters.get("node", ""),
            "ServiceFilter": filters.get("service", ""),
            "TagFilter": filters.get("tag", ""),
            "Version": 1,
            "LTime": self.ltime,
        }
        self.events.append(record)
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()
        return record

    def _index_header(self) -> str:
        if self.compound_index:
            return f"{self.index - 1}, {self.index}"
        return str(self.index)

    def _record(self, request: web.Request, body: bytes = b"") -> None:
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": request.headers.copy(),
            "body": body,
        })

    async def handle_list(self, request: web.Request) -> web.Response:
        self._record(request)
        if self.fail_next:
            return web.Response(status=self.fail_next.pop(0), text="agent error")
        if self.raw_next:
            return web.Response(
                text=self.raw_next.pop(0),
                content_type="application/json",
                headers={"X-Consul-Index": self._index_header()},
            )

        query = request.query
        if "index" in query and int(query["index"]) >= self.index:
            wait = parse_wait(query.get("wait", "5m"))
            if self.hang_next:
                self.hang_next -= 1
                await asyncio.sleep(wait)
            else:
                try:
                    await asyncio.wait_for(self._changed.wait(), wait)
                except asyncio.TimeoutError:
                    pass

        events = self.events
        if name := query.get("name"):
            events = [e for e in events if e["Name"] == name]
        return web.json_response(events, headers={"X-Consul-Index": self._index_header()})

    async def handle_fire(self, request: web.Request) -> web.Response:
        body = await request.read()
        self._record(request, body)
        if self.fail_next:
            return web.Response(status=self.fail_next.pop(0), text="Permission denied")
        record = self.add_event(
            request.match_info["name"],
            body or None,
            node=request.query.get("node", ""),
            service=request.query.get("service", ""),
            tag=request.query.get("tag", ""),
        )
        return web.json_response(record)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/v1/event/list", self.handle_list)
        app.router.add_put("/v1/event/fire/{name}", self.handle_fire)
        return app


@pytest.fixture
async def agent():
    """Running fake agent. Yields the FakeAgent with its address filled in."""
    fake = FakeAgent()
    server = TestServer(fake.app())
    await server.start_server()
    fake.address = f"{server.host}:{server.port}"
    yield fake
    await server.close()


@pytest.fixture
async def client(agent):
    """ConsulHTTPClient pointed at the fake agent, with short blocking waits."""
    cfg = make_test_config(address=agent.address, wait="2s", request_timeout=1.0)
    c = ConsulHTTPClient(cfg)
    yield c
    await c.close()
