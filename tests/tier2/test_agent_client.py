"""ConsulHTTPClient and EventAPI against the fake agent."""

from __future__ import annotations

import pytest

from consul_events.agent.api import EventAPI
from consul_events.agent.client import ConsulHTTPClient
from consul_events.errors import (
    ConfigurationError,
    FetchTimeout,
    MalformedResponseError,
    RequestRejected,
    TransportError,
)
from tests.conftest import make_test_config


# ── Blocking fetcher ──────────────────────────────────────────────


async def test_list_events_returns_index_and_events(agent, client):
    agent.add_event("deploy", b"v1")
    result = await client.list_events()

    assert result.index == "2"
    assert [e.name for e in result.events] == ["deploy"]
    assert result.events[0].payload == "djE="  # raw, not decoded
    assert "index" not in agent.requests[0]["query"]


async def test_blocking_query_parameters(agent, client):
    await client.list_events(name="deploy", index="0")

    query = agent.requests[0]["query"]
    assert query == {"name": "deploy", "index": "0", "wait": "2s"}


async def test_blocking_query_times_out_client_side(agent, client):
    with pytest.raises(FetchTimeout):
        await client.list_events(index="1")


async def test_server_error_is_transport_error(agent, client):
    agent.fail_next.append(500)
    with pytest.raises(TransportError):
        await client.list_events(index="0")


async def test_client_error_is_rejected(agent, client):
    agent.fail_next.append(403)
    with pytest.raises(RequestRejected) as info:
        await client.list_events(index="0")
    assert info.value.status_code == 403


async def test_connection_refused_is_transport_error():
    cfg = make_test_config(address="127.0.0.1:1", request_timeout=1.0, wait="2s")
    async with ConsulHTTPClient(cfg) as client:
        with pytest.raises(TransportError):
            await client.list_events(index="0")


@pytest.mark.parametrize("body", ["not json", '{"oops": true}', '[{"Name": "deploy"}]'])
async def test_malformed_body(agent, client, body):
    agent.raw_next.append(body)
    with pytest.raises(MalformedResponseError):
        await client.list_events()


async def test_token_and_datacenter_sent(agent):
    cfg = make_test_config(address=agent.address, token="secret-token", datacenter="dc2")
    async with ConsulHTTPClient(cfg) as client:
        await client.list_events()

    req = agent.requests[0]
    assert req["headers"]["X-Consul-Token"] == "secret-token"
    assert req["query"]["dc"] == "dc2"


# ── Fire / list ───────────────────────────────────────────────────


async def test_fire_with_text_payload(agent, client):
    event = await EventAPI(client).fire("deploy", "hello")

    assert event.name == "deploy"
    assert event.payload == "hello"
    req = agent.requests[0]
    assert req["method"] == "PUT"
    assert req["path"] == "/v1/event/fire/deploy"
    assert req["body"] == b"hello"


async def test_fire_with_bytes_payload_returns_bytes(agent, client):
    event = await EventAPI(client).fire("deploy", b"\x00\x01")
    assert event.payload == b"\x00\x01"


async def test_fire_without_payload(agent, client):
    event = await EventAPI(client).fire("restart")
    assert event.payload is None
    assert agent.requests[0]["body"] == b""


async def test_fire_sends_filters(agent, client):
    event = await EventAPI(client).fire(
        "deploy", "x", node="web-.*", service="api", tag="canary",
    )

    query = agent.requests[0]["query"]
    assert query == {"node": "web-.*", "service": "api", "tag": "canary"}
    assert event.node_filter == "web-.*"
    assert event.service_filter == "api"
    assert event.tag_filter == "canary"


@pytest.mark.parametrize("name", [None, "", "a/b", "has space"])
async def test_fire_rejects_bad_name_without_request(agent, client, name):
    with pytest.raises(ConfigurationError):
        await EventAPI(client).fire(name, "x")
    assert agent.requests == []


async def test_fire_rejected_by_agent(agent, client):
    agent.fail_next.append(403)
    with pytest.raises(RequestRejected):
        await EventAPI(client).fire("deploy")


async def test_list_decodes_payloads(agent, client):
    agent.add_event("deploy", b"v1")
    agent.add_event("restart", b"now")
    api = EventAPI(client)

    events = await api.list()
    assert [e.payload for e in events] == ["v1", "now"]

    raw = await api.list("restart", decode_payload=False)
    assert [e.payload for e in raw] == ["bm93"]
    assert agent.requests[-1]["query"] == {"name": "restart"}


async def test_watch_rejects_bad_filter_name(client):
    with pytest.raises(ConfigurationError):
        EventAPI(client).watch("")
