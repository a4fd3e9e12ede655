"""PostgreSQL database connection using raw asyncpg."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, cast
from uuid import UUID

import asyncpg

from narrative.core.exceptions import DatabaseConnectionError
from narrative.core.logging import get_logger
from narrative.storage.models import (
    Asset,
    AssetType,
    MarketDataCacheEntry,
    SentimentRecord,
    SyncLogEntry,
    SyncType,
    from_record,
)

logger = get_logger(__name__)


def _to_numeric(value: float | Decimal | None) -> Decimal | None:
    """Convert a provider float to Decimal for NUMERIC columns."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Database:
    """Async PostgreSQL database wrapper using asyncpg."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool: asyncpg.Pool[asyncpg.Record] | None = None

    async def connect(self) -> None:
        """Create connection pool."""
        # Convert SQLAlchemy-style DSN to asyncpg format
        dsn = self._dsn.replace("postgresql+asyncpg://", "postgresql://")

        try:
            self._pool = await asyncpg.create_pool(
                dsn,
                min_size=self._min_size,
                max_size=self._max_size,
            )
        except (OSError, asyncpg.PostgresError) as e:
            raise DatabaseConnectionError(f"Failed to create database pool: {e}") from e
        logger.debug("Database pool created", min_size=self._min_size, max_size=self._max_size)

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.debug("Database pool closed")

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
        """Acquire a connection from the pool."""
        if not self._pool:
            raise RuntimeError("Database not connected. Call connect() first.")
        async with self._pool.acquire() as conn:
            yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query and return status."""
        async with self.acquire() as conn:
            result = await conn.execute(query, *args)
            return cast(str, result)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Fetch multiple rows."""
        async with self.acquire() as conn:
            result = await conn.fetch(query, *args)
            return list(result)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Fetch a single value."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    # -------------------------------------------------------------------------
    # Assets and sentiment logs
    # -------------------------------------------------------------------------

    async def list_assets(self) -> list[Asset]:
        """Get all tracked assets, ordered by symbol."""
        rows = await self.fetch("SELECT id, symbol, name FROM asset ORDER BY symbol")
        return [from_record(Asset, row) for row in rows]

    async def get_asset_by_symbol(self, symbol: str) -> Asset | None:
        """Look up an asset by exact (case-sensitive) symbol."""
        row = await self.fetchrow("SELECT id, symbol, name FROM asset WHERE symbol = $1", symbol)
        return from_record(Asset, row) if row else None

    async def search_assets(self, query: str, limit: int = 10) -> list[Asset]:
        """Case-insensitive substring match on symbol or name."""
        rows = await self.fetch(
            """
            SELECT id, symbol, name FROM asset
            WHERE symbol ILIKE $1 OR name ILIKE $1
            ORDER BY symbol
            LIMIT $2
            """,
            f"%{query}%",
            limit,
        )
        return [from_record(Asset, row) for row in rows]

    async def insert_sentiment_log(self, asset_id: UUID, score: str, summary: str | None) -> UUID:
        """Append a sentiment record.

        Args:
            asset_id: Asset the assessment belongs to
            score: Score formatted with two decimals (e.g. "-0.25")
            summary: Scorer reasoning

        Returns:
            UUID of the inserted row
        """
        query = """
            INSERT INTO sentiment_log (asset_id, score, summary)
            VALUES ($1, $2, $3)
            RETURNING id
        """
        log_id = cast(UUID, await self.fetchval(query, asset_id, Decimal(score), summary))
        logger.debug("Sentiment log inserted", asset_id=str(asset_id), score=score)
        return log_id

    async def get_sentiment_history(self, symbol: str, limit: int = 30) -> list[SentimentRecord]:
        """Get the most recent sentiment records for a symbol, newest first."""
        query = """
            SELECT s.id, s.asset_id, s.score, s.summary, s.created_at
            FROM sentiment_log s
            JOIN asset a ON a.id = s.asset_id
            WHERE a.symbol = $1
            ORDER BY s.created_at DESC
            LIMIT $2
        """
        rows = await self.fetch(query, symbol, limit)
        return [from_record(SentimentRecord, row) for row in rows]

    # -------------------------------------------------------------------------
    # Market data cache
    # -------------------------------------------------------------------------

    async def upsert_market_data(self, entry: MarketDataCacheEntry) -> bool:
        """Insert or update the cache row for a symbol.

        Args:
            entry: Latest quote for the symbol

        Returns:
            True if the row was newly inserted, False if updated in place
        """
        query = """
            INSERT INTO market_data_cache (
                symbol, name, asset_type, price, price_open, price_high, price_low,
                price_previous_close, change_24h, change_percent_24h, volume_24h,
                market_cap, rank, fetched_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
            ON CONFLICT (symbol) DO UPDATE SET
                name = EXCLUDED.name,
                asset_type = EXCLUDED.asset_type,
                price = EXCLUDED.price,
                price_open = EXCLUDED.price_open,
                price_high = EXCLUDED.price_high,
                price_low = EXCLUDED.price_low,
                price_previous_close = EXCLUDED.price_previous_close,
                change_24h = EXCLUDED.change_24h,
                change_percent_24h = EXCLUDED.change_percent_24h,
                volume_24h = EXCLUDED.volume_24h,
                market_cap = EXCLUDED.market_cap,
                rank = EXCLUDED.rank,
                fetched_at = EXCLUDED.fetched_at,
                updated_at = NOW()
            RETURNING (xmax = 0) AS is_new
        """
        result = await self.fetchval(
            query,
            entry.symbol,
            entry.name,
            entry.asset_type,
            _to_numeric(entry.price),
            _to_numeric(entry.price_open),
            _to_numeric(entry.price_high),
            _to_numeric(entry.price_low),
            _to_numeric(entry.price_previous_close),
            _to_numeric(entry.change_24h),
            _to_numeric(entry.change_percent_24h),
            _to_numeric(entry.volume_24h),
            _to_numeric(entry.market_cap),
            entry.rank,
            entry.fetched_at,
        )
        is_new = result is True
        logger.debug(
            "Market data upserted",
            symbol=entry.symbol,
            asset_type=entry.asset_type,
            is_new=is_new,
        )
        return is_new

    async def get_market_data(
        self,
        asset_type: AssetType | None = None,
        limit: int = 20,
    ) -> list[MarketDataCacheEntry]:
        """Get cached quotes ordered by rank."""
        columns = """
            symbol, name, asset_type, price, price_open, price_high, price_low,
            price_previous_close, change_24h, change_percent_24h, volume_24h,
            market_cap, rank, fetched_at
        """
        if asset_type is None:
            rows = await self.fetch(
                f"SELECT {columns} FROM market_data_cache ORDER BY rank NULLS LAST LIMIT $1",
                limit,
            )
        else:
            rows = await self.fetch(
                f"SELECT {columns} FROM market_data_cache WHERE asset_type = $1 "
                "ORDER BY rank NULLS LAST LIMIT $2",
                asset_type,
                limit,
            )
        return [from_record(MarketDataCacheEntry, row) for row in rows]

    async def get_latest_fetched_at(self, asset_type: AssetType | None = None) -> datetime | None:
        """Get MAX(fetched_at) over the cache, optionally for one asset type."""
        if asset_type is None:
            value = await self.fetchval("SELECT MAX(fetched_at) FROM market_data_cache")
        else:
            value = await self.fetchval(
                "SELECT MAX(fetched_at) FROM market_data_cache WHERE asset_type = $1",
                asset_type,
            )
        return cast("datetime | None", value)

    # -------------------------------------------------------------------------
    # Sync log
    # -------------------------------------------------------------------------

    async def create_sync_log(self, sync_type: SyncType) -> UUID:
        """Insert a sync log row with status 'running'."""
        query = """
            INSERT INTO market_data_sync_log (sync_type, status)
            VALUES ($1, 'running')
            RETURNING id
        """
        log_id = cast(UUID, await self.fetchval(query, sync_type))
        logger.debug("Sync log created", sync_log_id=str(log_id), sync_type=sync_type)
        return log_id

    async def complete_sync_log(
        self,
        log_id: UUID,
        records_processed: int,
        api_requests_used: int,
    ) -> None:
        """Mark a sync log row completed with final counts."""
        query = """
            UPDATE market_data_sync_log
            SET status = 'completed',
                records_processed = $2,
                api_requests_used = $3,
                completed_at = NOW()
            WHERE id = $1
        """
        await self.execute(query, log_id, records_processed, api_requests_used)

    async def fail_sync_log(
        self,
        log_id: UUID,
        records_processed: int,
        api_requests_used: int,
        error_message: str,
    ) -> None:
        """Mark a sync log row failed with partial counts and the error."""
        query = """
            UPDATE market_data_sync_log
            SET status = 'failed',
                records_processed = $2,
                api_requests_used = $3,
                error_message = $4,
                completed_at = NOW()
            WHERE id = $1
        """
        await self.execute(query, log_id, records_processed, api_requests_used, error_message)

    async def get_latest_sync_log(self) -> SyncLogEntry | None:
        """Get the most recently started sync log row."""
        row = await self.fetchrow(
            """
            SELECT id, sync_type, status, records_processed, api_requests_used,
                   error_message, started_at, completed_at
            FROM market_data_sync_log
            ORDER BY started_at DESC
            LIMIT 1
            """
        )
        return from_record(SyncLogEntry, row) if row else None


# Global database instance (initialized in lifespan)
_db: Database | None = None


def get_database() -> Database:
    """Get the global database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


async def init_database(dsn: str) -> Database:
    """Initialize the global database instance."""
    global _db
    _db = Database(dsn)
    await _db.connect()
    return _db


async def close_database() -> None:
    """Close the global database instance."""
    global _db
    if _db:
        await _db.disconnect()
        _db = None
