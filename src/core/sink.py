"""Bounded, ordered channel of metric records between a scraper and its reader."""

import asyncio
from collections.abc import AsyncIterator

from src.ports.metrics import MetricRecord, MetricSinkPort

__all__ = ["MetricSink"]

_CLOSED = object()


class MetricSink(MetricSinkPort):
    """Single-producer record queue with a producer-closes-on-completion contract.

    The producer awaits put() for each record and calls close() when done
    (also after a failure). The reader iterates with `async for` and stops
    once every record put before close() has been delivered.

    A bounded queue applies backpressure: put() waits while the reader is
    behind, so at most `maxsize` records are in flight.
    """

    def __init__(self, maxsize: int = 256) -> None:
        """Initialize sink.

        Args:
            maxsize: Queue capacity (0 means unbounded).
        """
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._put_count = 0
        self._closer: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def put_count(self) -> int:
        """Number of records accepted so far."""
        return self._put_count

    async def put(self, record: MetricRecord) -> None:
        """Enqueue one record, waiting while the queue is full.

        Raises:
            RuntimeError: If the sink was already closed.
        """
        if self._closed:
            raise RuntimeError("Sink is closed; no further records accepted")
        await self._queue.put(record)
        self._put_count += 1

    def close(self) -> None:
        """Signal that no more records will be put. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # The end marker goes in as soon as the reader makes room.
            self._closer = asyncio.get_running_loop().create_task(self._queue.put(_CLOSED))

    async def __aiter__(self) -> AsyncIterator[MetricRecord]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]
