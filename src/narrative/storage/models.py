"""Row models for the relational store."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

AssetType = Literal["crypto", "stock"]
SyncStatus = Literal["pending", "running", "completed", "failed"]
SyncType = Literal["crypto", "stock", "all"]


class Asset(BaseModel):
    """A tracked asset (row of the `asset` table)."""

    id: UUID
    symbol: str
    name: str


class SentimentRecord(BaseModel):
    """One immutable sentiment assessment (row of `sentiment_log`)."""

    id: UUID
    asset_id: UUID
    score: Decimal
    summary: str | None = None
    created_at: datetime


class MarketDataCacheEntry(BaseModel):
    """Latest known quote for a symbol (row of `market_data_cache`)."""

    symbol: str
    name: str
    asset_type: AssetType
    price: Decimal
    price_open: Decimal | None = None
    price_high: Decimal | None = None
    price_low: Decimal | None = None
    price_previous_close: Decimal | None = None
    change_24h: Decimal | None = None
    change_percent_24h: Decimal | None = None
    volume_24h: Decimal | None = None
    market_cap: Decimal | None = None
    rank: int | None = None
    fetched_at: datetime


class SyncLogEntry(BaseModel):
    """One market data sync invocation (row of `market_data_sync_log`)."""

    id: UUID
    sync_type: SyncType
    status: SyncStatus
    records_processed: int = 0
    api_requests_used: int = 0
    error_message: str | None = None
    started_at: datetime
    completed_at: datetime | None = None


def from_record(model: type[BaseModel], record: Any) -> Any:
    """Validate an asyncpg Record (or mapping) into a row model."""
    return model.model_validate(dict(record))
