"""Wiring for running the pipeline jobs outside a request (scheduler, CLI)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from narrative.pipeline.flags import MockSettingsStore
from narrative.pipeline.market_sync import MarketDataSync
from narrative.pipeline.queue import IngestionQueue
from narrative.pipeline.seeder import Seeder
from narrative.pipeline.worker import SentimentWorker
from narrative.providers.twelvedata import TwelveDataClient
from narrative.providers.yahoo import YahooFinanceClient

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from narrative.config import Settings
    from narrative.storage.database import Database


@dataclass
class PipelineJobs:
    """The three jobs plus the HTTP clients they own."""

    seeder: Seeder
    worker: SentimentWorker
    market_sync: MarketDataSync
    yahoo: YahooFinanceClient
    twelvedata: TwelveDataClient

    async def close(self) -> None:
        await self.yahoo.close()
        await self.twelvedata.close()


def create_jobs(settings: Settings, db: Database, redis: Redis) -> PipelineJobs:
    queue = IngestionQueue(redis)
    yahoo = YahooFinanceClient(redis=redis, search_url=settings.yahoo_search_url)
    twelvedata = TwelveDataClient(base_url=settings.twelvedata_api_url)

    return PipelineJobs(
        seeder=Seeder(db=db, queue=queue),
        worker=SentimentWorker(
            queue=queue,
            flags=MockSettingsStore(redis),
            news=yahoo,
            db=db,
            time_budget_seconds=settings.worker_time_budget_seconds,
            news_count=settings.news_count,
        ),
        market_sync=MarketDataSync(
            db=db,
            quotes=twelvedata,
            batch_size=settings.twelvedata_batch_size,
            stale_after_hours=settings.market_data_stale_hours,
        ),
        yahoo=yahoo,
        twelvedata=twelvedata,
    )
