"""Time-budgeted sentiment worker.

One invocation drains the ingestion queue until it is empty or the time
budget is spent. Per ticker:

    pop -> news search -> score -> resolve asset -> append sentiment_log -> complete

A failure for one ticker is recorded in the report and the loop moves on;
the ticker's in-flight marker is released on both paths so the next
seeding pass can offer it again. Nothing is retried within an invocation.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from narrative.core.constants import DEFAULT_NEWS_COUNT, WORKER_TIME_BUDGET_SECONDS
from narrative.core.logging import get_logger
from narrative.pipeline.models import TickerError, WorkerReport
from narrative.processing.sentiment import LLMSentimentScorer, MockSentimentScorer

if TYPE_CHECKING:
    from narrative.pipeline.flags import MockSettingsStore
    from narrative.pipeline.queue import IngestionQueue
    from narrative.processing.sentiment import SentimentScorer
    from narrative.providers.base import NewsProvider
    from narrative.providers.yahoo.models import NewsItem
    from narrative.storage.database import Database

logger = get_logger(__name__)


def format_news_context(ticker: str, items: list[NewsItem]) -> str:
    """Render headlines as the scorer's user prompt."""
    return f"Recent news for {ticker}:\n- " + "\n- ".join(item.title for item in items)


class SentimentWorker:
    """Drains the ingestion queue within a wall-clock budget."""

    def __init__(
        self,
        queue: IngestionQueue,
        flags: MockSettingsStore,
        news: NewsProvider,
        db: Database,
        scorer: SentimentScorer | None = None,
        mock_scorer: SentimentScorer | None = None,
        time_budget_seconds: float = WORKER_TIME_BUDGET_SECONDS,
        news_count: int = DEFAULT_NEWS_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.queue = queue
        self.flags = flags
        self.news = news
        self.db = db
        self.scorer = scorer or LLMSentimentScorer()
        self.mock_scorer = mock_scorer or MockSentimentScorer()
        self.time_budget_seconds = time_budget_seconds
        self.news_count = news_count
        self._clock = clock

    async def _process(self, ticker: str, scorer: SentimentScorer) -> None:
        items = await self.news.search_news(ticker, self.news_count)
        context = format_news_context(ticker, items)
        analysis = await scorer.score(ticker, context)

        asset = await self.db.get_asset_by_symbol(ticker)
        if asset is None:
            logger.warning("No asset for ticker, sentiment not stored", ticker=ticker)
            return

        await self.db.insert_sentiment_log(asset.id, analysis.formatted_score, analysis.reasoning)
        logger.debug("Sentiment stored", ticker=ticker, score=analysis.formatted_score)

    async def run(self) -> WorkerReport:
        """Process queued tickers until the queue is empty or the budget is spent.

        Errors outside the per-ticker step (queue or flag store unreachable)
        propagate to the caller.
        """
        start = self._clock()
        mocked = await self.flags.is_scoring_mocked()
        scorer = self.mock_scorer if mocked else self.scorer

        processed = 0
        error_details: list[TickerError] = []

        while self._clock() - start < self.time_budget_seconds:
            ticker = await self.queue.pop()
            if ticker is None:
                break

            try:
                await self._process(ticker, scorer)
                processed += 1
            except Exception as e:
                logger.warning("Ticker processing failed", ticker=ticker, error=str(e))
                error_details.append(TickerError(ticker=ticker, error=str(e)))
            finally:
                await self.queue.complete(ticker)

        remaining = await self.queue.get_queue_length()
        execution_time_ms = int((self._clock() - start) * 1000)

        logger.info(
            "Worker run complete",
            processed=processed,
            errors=len(error_details),
            remaining_in_queue=remaining,
            mocked=mocked,
            execution_time_ms=execution_time_ms,
        )
        return WorkerReport(
            processed=processed,
            errors=len(error_details),
            error_details=error_details,
            remaining_in_queue=remaining,
            execution_time_ms=execution_time_ms,
            mocked=mocked,
        )
