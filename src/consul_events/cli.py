"""CLI entry point for consul_events."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from consul_events.agent.api import EventAPI
from consul_events.agent.client import ConsulHTTPClient
from consul_events.config import load_config
from consul_events.errors import ConsulEventsError
from consul_events.models.config import ClientConfig
from consul_events.models.events import UserEvent
from consul_events.runner import run_watch


def _load(ctx: click.Context) -> ClientConfig:
    """Load config or exit with the validation message."""
    try:
        return load_config(ctx.obj["config_path"])
    except ConsulEventsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _echo_event(event: UserEvent) -> None:
    click.echo(json.dumps(event.to_dict()))


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """consul-events - fire, list and watch Consul user events."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show client configuration."""
    cfg = _load(ctx)
    click.echo(f"Agent:      {cfg.base_url}")
    click.echo(f"Datacenter: {cfg.datacenter or '(agent default)'}")
    click.echo(f"Wait:       {cfg.wait}")
    click.echo(f"Timeout:    {cfg.request_timeout}s")
    click.echo(f"Backoff:    {cfg.retry.initial_backoff}s .. {cfg.retry.max_backoff}s")
    click.echo(f"Token:      {'***configured***' if cfg.token else '(not set)'}")


@cli.command()
@click.argument("name")
@click.option("--payload", default=None, help="Event payload")
@click.option("--node", default=None, help="Regex filter on node name")
@click.option("--service", default=None, help="Regex filter on service name")
@click.option("--tag", default=None, help="Regex filter on service tag (needs --service)")
@click.pass_context
def fire(
    ctx: click.Context,
    name: str,
    payload: str | None,
    node: str | None,
    service: str | None,
    tag: str | None,
) -> None:
    """Fire a new user event."""
    cfg = _load(ctx)

    async def _fire() -> UserEvent:
        async with ConsulHTTPClient(cfg) as client:
            return await EventAPI(client).fire(
                name, payload, node=node, service=service, tag=tag,
            )

    try:
        event = asyncio.run(_fire())
    except ConsulEventsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Event ID: {event.id}")


@cli.command(name="list")
@click.option("--name", default=None, help="Only events with this name")
@click.option("--raw", is_flag=True, help="Keep payloads base64-encoded")
@click.pass_context
def list_events(ctx: click.Context, name: str | None, raw: bool) -> None:
    """List the most recent events the agent has seen."""
    cfg = _load(ctx)

    async def _list() -> list[UserEvent]:
        async with ConsulHTTPClient(cfg) as client:
            return await EventAPI(client).list(name, decode_payload=not raw)

    try:
        events = asyncio.run(_list())
    except ConsulEventsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    for event in events:
        _echo_event(event)


@cli.command()
@click.option("--name", default=None, help="Only events with this name")
@click.option("--raw", is_flag=True, help="Keep payloads base64-encoded")
@click.pass_context
def watch(ctx: click.Context, name: str | None, raw: bool) -> None:
    """Print each new event as a JSON line until interrupted."""
    cfg = _load(ctx)

    async def _handle(event: UserEvent) -> None:
        _echo_event(event)

    try:
        asyncio.run(run_watch(cfg, _handle, name=name, decode_payload=not raw))
    except ConsulEventsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
