"""Trigger endpoints for the pipeline jobs.

Called by an external scheduler with `Authorization: Bearer <NARRATIVE_CRON_SECRET>`.
GET and POST are both accepted since schedulers differ in which they send.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from narrative.core.dependencies import MarketSyncDep, SeederDep, WorkerDep, verify_cron_secret
from narrative.core.exceptions import MarketSyncError
from narrative.core.logging import get_logger, job_context
from narrative.pipeline.models import SeedReport, SyncReport, WorkerReport

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(verify_cron_secret)])


@router.api_route(
    "/seed",
    methods=["GET", "POST"],
    response_model=SeedReport,
    responses={500: {"description": "Seeding failed"}},
)
async def seed(seeder: SeederDep) -> SeedReport | JSONResponse:
    try:
        with job_context("seed"):
            return await seeder.run()
    except Exception:
        logger.exception("Seed trigger failed")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.api_route(
    "/work",
    methods=["GET", "POST"],
    response_model=WorkerReport,
    responses={500: {"description": "Worker invocation failed"}},
)
async def work(worker: WorkerDep) -> WorkerReport | JSONResponse:
    try:
        with job_context("work"):
            return await worker.run()
    except Exception:
        logger.exception("Work trigger failed")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


@router.api_route(
    "/sync",
    methods=["GET", "POST"],
    response_model=SyncReport,
    responses={500: {"description": "Market data sync failed"}},
)
async def sync(market_sync: MarketSyncDep) -> SyncReport | JSONResponse:
    try:
        with job_context("sync"):
            return await market_sync.run()
    except MarketSyncError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Market data sync failed", "message": e.message},
        )
    except Exception as e:
        logger.exception("Sync trigger failed")
        return JSONResponse(
            status_code=500,
            content={"error": "Market data sync failed", "message": str(e)},
        )
