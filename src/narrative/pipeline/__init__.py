"""Ingestion pipeline jobs.

- IngestionQueue: deduplicating Redis work queue
- MockSettingsStore: process-wide scoring mock flag
- Seeder: offers every asset to the queue
- SentimentWorker: drains the queue within a time budget
- MarketDataSync: refreshes the market data cache
"""

from narrative.pipeline.factory import PipelineJobs, create_jobs
from narrative.pipeline.flags import MockSettings, MockSettingsStore
from narrative.pipeline.market_sync import MarketDataSync, is_stale
from narrative.pipeline.models import (
    MarketOverview,
    MarketStatus,
    QueueAddResult,
    QueueStats,
    SeedReport,
    SyncReport,
    TickerError,
    WorkerReport,
)
from narrative.pipeline.queue import IngestionQueue
from narrative.pipeline.seeder import Seeder
from narrative.pipeline.worker import SentimentWorker

__all__ = [
    "IngestionQueue",
    "MarketDataSync",
    "MarketOverview",
    "MarketStatus",
    "MockSettings",
    "MockSettingsStore",
    "PipelineJobs",
    "QueueAddResult",
    "QueueStats",
    "SeedReport",
    "Seeder",
    "SentimentWorker",
    "SyncReport",
    "TickerError",
    "WorkerReport",
    "create_jobs",
    "is_stale",
]
