"""Asyncio bridge over the Cassandra driver's asynchronous execution.

``Session.execute_async`` returns a ``ResponseFuture`` whose callbacks run on
the driver's event-loop thread. The executor hands every page delivered by
those callbacks over to the caller's asyncio loop, so awaiting a statement
never blocks the loop on network I/O. Paging is demand-driven: the next page
is only requested once the caller has consumed the current one.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

import structlog
from cassandra import InvalidRequest, OperationTimedOut, ReadTimeout, Unavailable, WriteTimeout
from cassandra.cluster import NoHostAvailable, ResponseFuture, Session
from cassandra.connection import ConnectionException

from mail_key_index.exceptions import InvalidArgument, StorageTimeout, StorageUnavailable

logger = structlog.get_logger()

_TIMEOUT_ERRORS = (OperationTimedOut, ReadTimeout, WriteTimeout)
_UNAVAILABLE_ERRORS = (NoHostAvailable, Unavailable, ConnectionException)


def translate_driver_error(exc: BaseException) -> BaseException:
    """Map a driver exception onto the key index error taxonomy.

    Exceptions outside the taxonomy are returned unchanged.
    """

    if isinstance(exc, _TIMEOUT_ERRORS):
        translated: BaseException = StorageTimeout(str(exc))
    elif isinstance(exc, _UNAVAILABLE_ERRORS):
        translated = StorageUnavailable(str(exc))
    elif isinstance(exc, InvalidRequest):
        translated = InvalidArgument(str(exc))
    else:
        return exc

    translated.__cause__ = exc
    return translated


class _PageFeed:
    """Receives the pages of one ResponseFuture on an asyncio queue."""

    def __init__(self, response_future: ResponseFuture, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[tuple[Sequence[Any] | None, BaseException | None]] = (
            asyncio.Queue()
        )
        self.response_future = response_future
        # Callbacks stay registered and fire again for every fetched page.
        response_future.add_callbacks(callback=self._on_page, errback=self._on_error)

    def _on_page(self, rows: Sequence[Any] | None) -> None:
        self._loop.call_soon_threadsafe(self._queue.put_nowait, (rows, None))

    def _on_error(self, exc: BaseException) -> None:
        self._loop.call_soon_threadsafe(self._queue.put_nowait, (None, exc))

    async def next_page(self) -> Sequence[Any]:
        rows, exc = await self._queue.get()
        if exc is not None:
            translated = translate_driver_error(exc)
            logger.warning(
                "cassandra_request_failed",
                error_type=type(exc).__name__,
                raised=type(translated).__name__,
                error=str(exc),
            )
            raise translated
        return rows or []

    @property
    def has_more_pages(self) -> bool:
        return bool(self.response_future.has_more_pages)

    def request_next_page(self) -> None:
        self.response_future.start_fetching_next_page()


class AsyncExecutor:
    """Runs statements on a shared session and awaits them from asyncio.

    The executor holds no per-request state, so one instance can serve any
    number of concurrent operations.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _submit(self, statement: Any) -> _PageFeed:
        loop = asyncio.get_running_loop()
        return _PageFeed(self._session.execute_async(statement), loop)

    async def execute(self, statement: Any) -> list[Any]:
        """Execute a statement and return the rows of its first page.

        Raises:
            StorageTimeout: If the request exceeded its deadline.
            StorageUnavailable: If no replica could serve the request.
            InvalidArgument: If Cassandra rejected the bound values.
        """

        feed = self._submit(statement)
        return list(await feed.next_page())

    async def execute_void(self, statement: Any) -> None:
        """Execute a statement whose rows (if any) are not needed."""

        feed = self._submit(statement)
        await feed.next_page()

    async def execute_paged(self, statement: Any) -> AsyncIterator[Any]:
        """Execute a statement and yield the rows of every page, lazily."""

        feed = self._submit(statement)
        while True:
            for row in await feed.next_page():
                yield row
            if not feed.has_more_pages:
                return
            feed.request_next_page()
