"""Optional in-process scheduler for the pipeline jobs.

Production triggers the jobs through the cron endpoints; this scheduler is
for deployments without an external scheduler (NARRATIVE_SCHEDULER_ENABLED).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from narrative.core.logging import get_logger, job_context

if TYPE_CHECKING:
    from narrative.config import Settings
    from narrative.pipeline.market_sync import MarketDataSync
    from narrative.pipeline.seeder import Seeder
    from narrative.pipeline.worker import SentimentWorker

logger = get_logger(__name__)


def create_scheduler() -> AsyncIOScheduler:
    """Create a new scheduler instance."""
    return AsyncIOScheduler(timezone="UTC")


async def seed_job(seeder: Seeder) -> None:
    """Offer every asset to the ingestion queue."""
    try:
        with job_context("seed"):
            await seeder.run()
    except Exception:
        logger.exception("Seed job failed")


async def work_job(worker: SentimentWorker) -> None:
    """Drain the ingestion queue once."""
    try:
        with job_context("work"):
            await worker.run()
    except Exception:
        logger.exception("Work job failed")


async def sync_job(market_sync: MarketDataSync) -> None:
    """Refresh the market data cache."""
    try:
        with job_context("sync"):
            await market_sync.run()
    except Exception:
        logger.exception("Market data sync job failed")


def register_jobs(
    scheduler: AsyncIOScheduler,
    settings: Settings,
    seeder: Seeder,
    worker: SentimentWorker,
    market_sync: MarketDataSync,
) -> None:
    """Add the seed, work and sync jobs on their configured crontabs."""
    jobs = (
        ("seed", seed_job, settings.seed_cron, seeder),
        ("work", work_job, settings.work_cron, worker),
        ("sync", sync_job, settings.sync_cron, market_sync),
    )
    for job_id, func, crontab, target in jobs:
        scheduler.add_job(
            func,
            CronTrigger.from_crontab(crontab, timezone="UTC"),
            args=[target],
            id=job_id,
            max_instances=1,
            coalesce=True,
        )
        logger.debug("Job scheduled", job_id=job_id, crontab=crontab)
