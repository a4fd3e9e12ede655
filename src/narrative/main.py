"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from narrative import __version__
from narrative.api import api_router
from narrative.config import get_settings
from narrative.core.dependencies import close_clients
from narrative.core.exceptions import AuthenticationError
from narrative.core.logging import get_logger, setup_logging
from narrative.jobs import create_scheduler, register_jobs
from narrative.pipeline import create_jobs
from narrative.storage.database import close_database, get_database, init_database
from narrative.storage.redis import close_redis, get_redis, init_redis

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: connects stores and optionally starts the scheduler."""
    settings = get_settings()
    setup_logging(settings)

    redis = await init_redis(settings.redis_url)

    scheduler = None
    jobs = None
    try:
        db = await init_database(settings.database_url)

        if settings.scheduler_enabled:
            jobs = create_jobs(settings, db, redis)
            scheduler = create_scheduler()
            register_jobs(scheduler, settings, jobs.seeder, jobs.worker, jobs.market_sync)
            scheduler.start()
            logger.info("Scheduler started")

        logger.info("Narrative ready", env=settings.env, scheduler=settings.scheduler_enabled)
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.debug("Scheduler stopped")
        if jobs is not None:
            await jobs.close()
        await close_clients()
        await close_database()
        await close_redis()
        logger.info("Narrative stopped")


app = FastAPI(
    title="Narrative",
    description="Asset sentiment ingestion and market data sync",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.warning("Unauthorized request", path=request.url.path, reason=exc.message)
    return JSONResponse(status_code=401, content={"error": "Unauthorized"})


# Infrastructure (no prefix, not versioned)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: always ok if process is running."""
    return {"status": "ok"}


@app.get("/ready")
async def ready() -> dict[str, str]:
    """Readiness check: verifies infrastructure is connected."""
    checks: dict[str, str] = {}
    try:
        await get_redis().ping()  # type: ignore[misc]
        checks["redis"] = "ok"
    except Exception:
        checks["redis"] = "error"
    try:
        checks["db"] = "ok" if get_database().is_connected else "error"
    except RuntimeError:
        checks["db"] = "error"
    status = "ready" if all(v != "error" for v in checks.values()) else "not_ready"
    return {"status": status, **checks}


# Domain API
app.include_router(api_router, prefix="/api/v1")
