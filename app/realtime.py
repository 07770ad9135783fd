"""
Realtime Change Feed.

The synchronous ``supabase.Client`` has no realtime support, so change
notifications run on the async client inside a ``RealtimeBridge``: one
daemon thread owning an asyncio event loop and a lazily created
``AsyncClient``.  Blocking callers schedule work on that loop and wait for
the result.

Each table subscription is wrapped in a ``ChangeSubscription`` that can be
consumed two ways:

- push: an optional callback invoked (from the realtime loop thread) with
  each ``ChangeEvent``;
- pull: iteration, yielding events lazily until ``unsubscribe()`` is
  called.

Events are only buffered once the subscription is read as a sequence, or
when no callback was given.  When the buffer is full the oldest event is
dropped.  There is no replay of missed events and no reconnection policy;
both are left to the realtime client.
"""

from __future__ import annotations

import asyncio
import inspect
import queue
import threading
from typing import Any, Awaitable, Callable, Coroutine, Iterator, Optional

from pydantic import ValidationError
from supabase import AsyncClient

from app.logger import StructuredLogger
from app.models.change_event import ChangeEvent

ChangeCallback = Callable[[ChangeEvent], None]
AsyncClientFactory = Callable[[], Awaitable[AsyncClient]]

_DEFAULT_BUFFER_SIZE: int = 1000
_DEFAULT_TIMEOUT: float = 10.0


class RealtimeBridge:
    """Runs the async Supabase realtime client on a dedicated loop thread.

    Parameters
    ----------
    client_factory:
        Coroutine function returning an ``AsyncClient``,
        typically ``lambda: acreate_client(url, key)``.  Called once, on
        the loop thread, at the first subscription.
    logger:
        Structured logger.
    timeout:
        Seconds a blocking caller waits for subscribe or remove to finish.
    """

    THREAD_NAME = "realtime-loop"

    def __init__(
        self,
        client_factory: AsyncClientFactory,
        logger: StructuredLogger,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._client_factory = client_factory
        self._logger = logger
        self._timeout = timeout
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._client: Optional[AsyncClient] = None
        self._closed: bool = False

    # ------------------------------------------------------------------
    # Loop management
    # ------------------------------------------------------------------

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._closed:
                raise RuntimeError("Realtime connection is closed.")
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._run_loop,
                    args=(self._loop,),
                    name=self.THREAD_NAME,
                    daemon=True,
                )
                self._thread.start()
                self._logger.debug("Realtime event loop started.")
            return self._loop

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    def _on_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def _call(self, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            loop = self._ensure_loop()
        except RuntimeError:
            coro.close()
            raise
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        if self._on_loop_thread():
            # Called from a realtime callback; waiting here would block the loop.
            return None
        return future.result(timeout=self._timeout)

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            self._client = await self._client_factory()
        return self._client

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    async def _subscribe(
        self,
        topic: str,
        schema: str,
        table: str,
        callback: Callable[[dict[str, Any]], None],
        access_token: Optional[str],
    ) -> Any:
        client = await self._get_client()
        realtime = client.realtime
        if not getattr(realtime, "is_connected", False):
            await realtime.connect()
        if access_token:
            result = realtime.set_auth(access_token)
            if inspect.isawaitable(result):
                await result

        channel = client.channel(topic)
        channel.on_postgres_changes("*", schema=schema, table=table, callback=callback)
        await channel.subscribe()
        return channel

    def subscribe(
        self,
        topic: str,
        schema: str,
        table: str,
        callback: Callable[[dict[str, Any]], None],
        access_token: Optional[str] = None,
    ) -> Any:
        """Open a channel for every change on ``schema.table``.

        Blocks until the channel is subscribed and returns it.  *callback*
        receives the raw payload on the loop thread.
        """
        return self._call(self._subscribe(topic, schema, table, callback, access_token))

    async def _remove(self, channel: Any) -> None:
        client = await self._get_client()
        await client.remove_channel(channel)

    def remove_channel(self, channel: Any) -> None:
        """Unsubscribe *channel* and drop it from the client."""
        with self._lock:
            if self._closed:
                # close() already removed every channel.
                return
        self._call(self._remove(channel))

    def close(self) -> None:
        """Remove every open channel and stop the loop thread.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            loop, thread = self._loop, self._thread

        if loop is None or thread is None:
            return

        try:
            if self._client is not None:
                future = asyncio.run_coroutine_threadsafe(
                    self._client.remove_all_channels(), loop,
                )
                future.result(timeout=self._timeout)
        except Exception as exc:
            self._logger.warning("Failed to remove realtime channels: %s", exc)
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout=self._timeout)
            if not thread.is_alive():
                loop.close()
            self._logger.debug("Realtime event loop stopped.")


class _Closed:
    """Queue sentinel marking the end of the stream."""


_CLOSED = _Closed()


class ChangeSubscription:
    """Cancellable handle over a table's change feed.

    Parameters
    ----------
    table:
        Table the feed is keyed to.
    logger:
        Structured logger.
    callback:
        Optional push consumer.  Exceptions it raises are logged and do not
        stop delivery.
    buffer_size:
        Maximum number of unread events kept for iteration.
    """

    def __init__(
        self,
        table: str,
        logger: StructuredLogger,
        callback: Optional[ChangeCallback] = None,
        buffer_size: int = _DEFAULT_BUFFER_SIZE,
    ) -> None:
        self._table = table
        self._logger = logger
        self._callback = callback
        self._queue: queue.Queue[ChangeEvent | _Closed] = queue.Queue(maxsize=buffer_size)
        self._lock = threading.Lock()
        self._closed: bool = False
        self._buffering: bool = callback is None
        self._channel: Optional[object] = None
        self._remove_channel: Optional[Callable[[Any], object]] = None

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def attach(self, channel: object, remove_channel: Callable[[Any], object]) -> None:
        """Bind the live channel and the function that disposes of it."""
        with self._lock:
            self._channel = channel
            self._remove_channel = remove_channel

    def deliver(self, payload: dict[str, Any]) -> None:
        """Realtime callback: normalise *payload* and hand it to consumers."""
        with self._lock:
            if self._closed:
                return
            buffering = self._buffering

        try:
            event = ChangeEvent.from_payload(payload)
        except (ValueError, ValidationError) as exc:
            self._logger.warning(
                "Ignoring malformed change event on %s: %s", self._table, exc,
            )
            return

        if self._callback is not None:
            try:
                self._callback(event)
            except Exception as exc:
                self._logger.error(
                    "Change callback failed for %s: %s",
                    self._table,
                    exc,
                    exc_info=True,
                )

        if buffering:
            self._enqueue(event)

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        with self._lock:
            return not self._closed

    def next_event(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """Return the next buffered event.

        The first call switches buffering on for callback subscriptions;
        events delivered before it are not replayed.  Blocks up to
        *timeout* seconds (forever when ``None``).  Returns ``None`` on
        timeout or once the subscription has been closed and drained.
        """
        with self._lock:
            self._buffering = True
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if isinstance(item, _Closed):
            # Leave the sentinel in place for other consumers.
            self._queue.put_nowait(item)
            return None
        return item

    def __iter__(self) -> Iterator[ChangeEvent]:
        with self._lock:
            self._buffering = True
        while True:
            event = self.next_event()
            if event is None:
                return
            yield event

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    def unsubscribe(self) -> None:
        """Stop delivery and release the channel.

        Idempotent.  Events already buffered remain readable; iteration
        ends once they are drained.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            channel, remove = self._channel, self._remove_channel
            self._channel = None
            self._remove_channel = None

        try:
            if channel is not None and remove is not None:
                remove(channel)
                self._logger.info("Unsubscribed from %s changes.", self._table)
        finally:
            self._enqueue(_CLOSED)

    def __enter__(self) -> "ChangeSubscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enqueue(self, item: ChangeEvent | _Closed) -> None:
        while True:
            try:
                self._queue.put_nowait(item)
                return
            except queue.Full:
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                if isinstance(dropped, _Closed):
                    # Never drop the end-of-stream marker.
                    self._queue.put_nowait(dropped)
                    return
                self._logger.warning(
                    "Change buffer full for %s; dropped oldest event.", self._table,
                )
