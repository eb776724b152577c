"""Process runner - keeps one event watch alive until SIGINT/SIGTERM."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Awaitable, Callable

from consul_events.agent.api import EventAPI
from consul_events.agent.client import ConsulHTTPClient
from consul_events.models.config import ClientConfig
from consul_events.models.events import UserEvent

log = logging.getLogger(__name__)

EventHandler = Callable[[UserEvent], Awaitable[None]]


async def run_watch(
    cfg: ClientConfig,
    handler: EventHandler,
    name: str | None = None,
    decode_payload: bool = True,
) -> None:
    """Deliver every new event to `handler` until a stop signal arrives.

    Errors raised by the handler, and terminal watch errors, end the run.
    """
    async with ConsulHTTPClient(cfg) as client:
        watch = EventAPI(client).watch(name, decode_payload=decode_payload)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, watch.stop)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                pass

        log.info("Connected to agent at %s", cfg.base_url)
        try:
            async for event in watch:
                await handler(event)
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.remove_signal_handler(sig)
                except NotImplementedError:
                    pass
            await watch.aclose()
            log.info("Watch shut down cleanly")
