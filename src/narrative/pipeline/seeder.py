"""Seeder: offer every tracked asset to the ingestion queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from narrative.core.logging import get_logger
from narrative.pipeline.models import SeedReport

if TYPE_CHECKING:
    from narrative.pipeline.queue import IngestionQueue
    from narrative.storage.database import Database

logger = get_logger(__name__)


class Seeder:
    """Enqueues all asset symbols; the queue drops ones already in flight."""

    def __init__(self, db: Database, queue: IngestionQueue) -> None:
        self.db = db
        self.queue = queue

    async def run(self) -> SeedReport:
        assets = await self.db.list_assets()

        queued = skipped = 0
        for asset in assets:
            result = await self.queue.add(asset.symbol)
            if result.queued:
                queued += 1
            else:
                skipped += 1

        logger.info("Seeding complete", total_assets=len(assets), queued=queued, skipped=skipped)
        return SeedReport(total_assets=len(assets), queued=queued, skipped=skipped)
