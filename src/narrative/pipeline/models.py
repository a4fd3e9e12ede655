"""Report models returned by the pipeline jobs.

Attributes are snake_case; JSON uses camelCase aliases so trigger responses
keep the field names consumers already read (`remainingInQueue`, ...).
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from narrative.storage.models import MarketDataCacheEntry, SyncLogEntry


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QueueAddResult(_CamelModel):
    """Outcome of offering a ticker to the ingestion queue."""

    status: Literal["queued", "skipped"]
    ticker: str
    reason: Literal["already_queued"] | None = None

    @property
    def queued(self) -> bool:
        return self.status == "queued"


class QueueStats(_CamelModel):
    queue_length: int
    in_flight: int


class TickerError(_CamelModel):
    """Soft failure recorded for one ticker during a worker run."""

    ticker: str
    error: str


class WorkerReport(_CamelModel):
    success: bool = True
    processed: int = 0
    errors: int = 0
    error_details: list[TickerError] = Field(default_factory=list)
    remaining_in_queue: int = 0
    execution_time_ms: int = 0
    mocked: bool = False


class SeedReport(_CamelModel):
    success: bool = True
    total_assets: int = 0
    queued: int = 0
    skipped: int = 0


class SyncReport(_CamelModel):
    success: bool = True
    records_processed: int = 0
    api_requests_used: int = 0
    execution_time_ms: int = 0
    crypto_count: int = 0
    stock_count: int = 0


class MarketStatus(_CamelModel):
    """Freshness of the market data cache."""

    last_fetched_at: datetime | None = None
    is_stale: bool
    stale_after_hours: float
    latest_sync: SyncLogEntry | None = None


class MarketOverview(_CamelModel):
    """Cached top cryptos with aggregated stats."""

    cryptos: list[MarketDataCacheEntry]
    total_market_cap: float = 0.0
    total_volume_24h: float = 0.0
    btc_dominance: float = 0.0
    last_updated: datetime | None = None
    is_stale: bool = True
    latest_sync: SyncLogEntry | None = None
