"""Event watch - the blocking-query loop behind EventAPI.watch()."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable

from consul_events.errors import ConfigurationError, FetchError, FetchTimeout
from consul_events.interfaces.fetcher import EventFetcher
from consul_events.models.config import RetryConfig
from consul_events.models.events import UserEvent, WatchSession, WatchState, validate_name
from consul_events.watch.clock import advance
from consul_events.watch.cursor import normalize_index

log = logging.getLogger(__name__)

# Undelivered events held before the loop stops fetching
DEFAULT_MAX_PENDING = 1024


class _Closed:
    """Queue marker: the stream ended, with `error` if the loop failed."""

    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error


class EventWatch:
    """A running watch for new user events.

    Iterate it with ``async for`` to receive events; call stop() to end it.
    The loop task starts in start(), so the handle exists (and can be
    stopped) before the first blocking query returns. The server wait comes
    from the fetcher's own configuration. At most `max_pending` events wait
    for the consumer; when the queue is full the loop waits before issuing
    the next query.

    Raises ConfigurationError for a malformed `name`.
    """

    def __init__(
        self,
        fetcher: EventFetcher,
        name: str | None = None,
        decode_payload: bool = True,
        retry: RetryConfig | None = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        validate_name(name)
        if max_pending < 1:
            raise ConfigurationError(f"max_pending must be at least 1, got {max_pending}")
        self._fetcher = fetcher
        self._retry = retry or RetryConfig()
        self.session = WatchSession(filter_name=name, decode_payload=decode_payload)
        self._queue: asyncio.Queue[UserEvent | _Closed] = asyncio.Queue(maxsize=max_pending)
        self._task: asyncio.Task[None] | None = None
        self._stop_requested = False
        self._finished = False

    @property
    def stopped(self) -> bool:
        return self.session.state is WatchState.STOPPED

    def start(self) -> EventWatch:
        """Schedule the loop on the running event loop."""
        if self._task is None and not self._stop_requested:
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name=f"event-watch:{self.session.filter_name or '*'}",
            )
            log.info("Watching events (name: %s)", self.session.filter_name or "(all)")
        return self

    def stop(self) -> None:
        """Stop the watch. No event is yielded once this has been called."""
        if self._stop_requested:
            return
        self._stop_requested = True
        self.session.state = WatchState.STOPPED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        try:
            self._queue.put_nowait(_Closed())
        except asyncio.QueueFull:
            # __anext__ checks the stop flag before touching a non-empty queue
            pass
        log.info("Stopped event watch (name: %s)", self.session.filter_name or "(all)")

    async def aclose(self) -> None:
        self.stop()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        session = self.session
        try:
            while not self._stop_requested:
                try:
                    result = await self._fetcher.list_events(
                        name=session.filter_name, index=session.cursor,
                    )
                    cursor = normalize_index(result.index)
                except FetchTimeout:
                    log.debug("Blocking query timed out, re-polling at index %s", session.cursor)
                    continue
                except FetchError as exc:
                    session.consecutive_failures += 1
                    delay = self._retry.delay(session.consecutive_failures)
                    log.warning(
                        "Event fetch failed (attempt %d), retrying at index %s in %.1fs: %s",
                        session.consecutive_failures, session.cursor, delay, exc,
                    )
                    await asyncio.sleep(delay)
                    continue

                session.consecutive_failures = 0
                if cursor != session.cursor:
                    log.debug("Index moved %s -> %s", session.cursor, cursor)
                session.cursor = cursor

                fresh = advance(session, result.events)
                for event in fresh:
                    await self._queue.put(event)
                if fresh:
                    log.info(
                        "Emitted %d new events (watermark: %d)",
                        len(fresh), session.clock_watermark,
                    )
        except Exception as exc:
            log.error("Event watch terminated: %s", exc, exc_info=True)
            session.state = WatchState.STOPPED
            await self._queue.put(_Closed(exc))

    def __aiter__(self) -> AsyncIterator[UserEvent]:
        return self

    async def __anext__(self) -> UserEvent:
        if self._finished or self._stop_requested:
            self._finished = True
            raise StopAsyncIteration
        item = await self._queue.get()
        if self._stop_requested:
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _Closed):
            self._finished = True
            if item.error is not None:
                raise item.error
            raise StopAsyncIteration
        return item

    async def __aenter__(self) -> EventWatch:
        return self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def start_watch(
    fetcher: EventFetcher,
    name: str | None = None,
    decode_payload: bool = True,
    retry: RetryConfig | None = None,
    max_pending: int = DEFAULT_MAX_PENDING,
) -> tuple[EventWatch, Callable[[], None]]:
    """Start a watch and return the event stream with its stop function.

    Must be called from within a running event loop. A malformed `name`
    raises ConfigurationError before any request is made.
    """
    watch = EventWatch(
        fetcher, name, decode_payload, retry=retry, max_pending=max_pending,
    ).start()
    return watch, watch.stop
