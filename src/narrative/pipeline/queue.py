"""Deduplicating ingestion queue backed by Redis.

Redis Key Schema:
- narrative:queue - List of pending tickers (LPUSH in, RPOP out => FIFO)
- narrative:processing - Set of in-flight tickers (queued or being processed)

The in-flight set is the deduplication authority. A ticker stays in it from
`add` until the worker calls `complete`, so it is still reserved after it has
been popped and while it is being scored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from narrative.core.constants import PROCESSING_SET_KEY, QUEUE_KEY
from narrative.core.logging import get_logger
from narrative.pipeline.models import QueueAddResult, QueueStats

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class IngestionQueue:
    """FIFO queue of ticker symbols with at most one outstanding entry per ticker."""

    def __init__(
        self,
        redis: Redis,
        queue_key: str = QUEUE_KEY,
        processing_key: str = PROCESSING_SET_KEY,
    ) -> None:
        self.redis = redis
        self.queue_key = queue_key
        self.processing_key = processing_key

    async def add(self, ticker: str) -> QueueAddResult:
        """Enqueue a ticker unless it is already in flight.

        SADD is the linearization point: of two concurrent adds for the same
        ticker only one sees a reply of 1, so only one pushes.

        Args:
            ticker: Ticker symbol, stored as given

        Returns:
            QueueAddResult with status "queued" or "skipped"
        """
        added = await self.redis.sadd(self.processing_key, ticker)  # type: ignore[misc]
        if added == 0:
            logger.debug("Ticker already in flight", ticker=ticker)
            return QueueAddResult(status="skipped", ticker=ticker, reason="already_queued")

        await self.redis.lpush(self.queue_key, ticker)  # type: ignore[misc]
        logger.debug("Ticker queued", ticker=ticker)
        return QueueAddResult(status="queued", ticker=ticker)

    async def pop(self) -> str | None:
        """Pop the oldest ticker, or None if the queue is empty.

        Leaves the in-flight marker in place; call `complete` when done.
        """
        value = await self.redis.rpop(self.queue_key)  # type: ignore[misc]
        if value is None:
            return None
        return _decode(value)

    async def complete(self, ticker: str) -> None:
        """Release the in-flight marker for a ticker."""
        await self.redis.srem(self.processing_key, ticker)  # type: ignore[misc]
        logger.debug("Ticker completed", ticker=ticker)

    async def get_queue_length(self) -> int:
        """Number of tickers waiting in the queue (monitoring only)."""
        return int(await self.redis.llen(self.queue_key))  # type: ignore[misc]

    async def get_in_flight_count(self) -> int:
        """Number of tickers holding an in-flight marker (monitoring only)."""
        return int(await self.redis.scard(self.processing_key))  # type: ignore[misc]

    async def get_stats(self) -> QueueStats:
        return QueueStats(
            queue_length=await self.get_queue_length(),
            in_flight=await self.get_in_flight_count(),
        )
