"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends, Header
from pydantic import SecretStr
from redis.asyncio import Redis

from narrative.config import Settings, get_settings
from narrative.core.exceptions import AuthenticationError
from narrative.pipeline.flags import MockSettingsStore
from narrative.pipeline.market_sync import MarketDataSync
from narrative.pipeline.queue import IngestionQueue
from narrative.pipeline.seeder import Seeder
from narrative.pipeline.worker import SentimentWorker
from narrative.providers.twelvedata import TwelveDataClient
from narrative.providers.yahoo import YahooFinanceClient
from narrative.storage.database import Database, get_database
from narrative.storage.redis import get_redis

# Type aliases for cleaner dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Module-level singletons (initialised lazily on first use)
_yahoo_client: YahooFinanceClient | None = None
_twelvedata_client: TwelveDataClient | None = None


def get_db() -> Database:
    """Get database dependency."""
    return get_database()


async def get_yahoo_client(redis: Redis = Depends(get_redis)) -> YahooFinanceClient:
    """Get or create singleton Yahoo Finance client."""
    global _yahoo_client
    if _yahoo_client is None:
        _yahoo_client = YahooFinanceClient(redis=redis)
    return _yahoo_client


def get_twelvedata_client() -> TwelveDataClient:
    """Get or create singleton Twelve Data client."""
    global _twelvedata_client
    if _twelvedata_client is None:
        _twelvedata_client = TwelveDataClient()
    return _twelvedata_client


async def close_clients() -> None:
    """Close singleton HTTP clients (called on shutdown)."""
    global _yahoo_client, _twelvedata_client
    if _yahoo_client is not None:
        await _yahoo_client.close()
        _yahoo_client = None
    if _twelvedata_client is not None:
        await _twelvedata_client.close()
        _twelvedata_client = None


def get_queue(redis: Redis = Depends(get_redis)) -> IngestionQueue:
    return IngestionQueue(redis)


def get_flags(redis: Redis = Depends(get_redis)) -> MockSettingsStore:
    return MockSettingsStore(redis)


def get_seeder(
    db: Database = Depends(get_db),
    queue: IngestionQueue = Depends(get_queue),
) -> Seeder:
    return Seeder(db=db, queue=queue)


def get_worker(
    settings: SettingsDep,
    db: Database = Depends(get_db),
    queue: IngestionQueue = Depends(get_queue),
    flags: MockSettingsStore = Depends(get_flags),
    news: YahooFinanceClient = Depends(get_yahoo_client),
) -> SentimentWorker:
    return SentimentWorker(
        queue=queue,
        flags=flags,
        news=news,
        db=db,
        time_budget_seconds=settings.worker_time_budget_seconds,
        news_count=settings.news_count,
    )


def get_market_sync(
    settings: SettingsDep,
    db: Database = Depends(get_db),
    quotes: TwelveDataClient = Depends(get_twelvedata_client),
) -> MarketDataSync:
    return MarketDataSync(
        db=db,
        quotes=quotes,
        batch_size=settings.twelvedata_batch_size,
        stale_after_hours=settings.market_data_stale_hours,
    )


# ---------------------------------------------------------------------------
# Shared-secret guards
# ---------------------------------------------------------------------------


def bearer_matches(authorization: str | None, secret: SecretStr | None) -> bool:
    """Constant-time check of `Authorization: Bearer <secret>`.

    An unset or empty secret never matches.
    """
    if secret is None or not secret.get_secret_value() or not authorization:
        return False
    expected = f"Bearer {secret.get_secret_value()}"
    return hmac.compare_digest(authorization.encode(), expected.encode())


def verify_cron_secret(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject trigger calls without the configured cron secret."""
    if not bearer_matches(authorization, settings.cron_secret):
        raise AuthenticationError("Invalid or missing cron secret")


def verify_admin_token(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Reject admin calls without the configured admin token."""
    if not bearer_matches(authorization, settings.admin_token):
        raise AuthenticationError("Invalid or missing admin token")


# Annotated dependencies for use in route handlers
DbDep = Annotated[Database, Depends(get_db)]
QueueDep = Annotated[IngestionQueue, Depends(get_queue)]
FlagsDep = Annotated[MockSettingsStore, Depends(get_flags)]
SeederDep = Annotated[Seeder, Depends(get_seeder)]
WorkerDep = Annotated[SentimentWorker, Depends(get_worker)]
MarketSyncDep = Annotated[MarketDataSync, Depends(get_market_sync)]
YahooClientDep = Annotated[YahooFinanceClient, Depends(get_yahoo_client)]
