"""Market data sync and cache staleness.

Sync Flow:
    sync log (running) -> crypto quotes -> upsert -> stock quotes -> upsert
    -> sync log (completed | failed)

Each quote is upserted by symbol, so re-running the sync refreshes rows in
place. Rank is the quote's position within its universe. Readers judge
freshness from MAX(fetched_at) alone.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from narrative.core.constants import MARKET_DATA_STALE_HOURS, TWELVEDATA_BATCH_SIZE
from narrative.core.exceptions import MarketSyncError
from narrative.core.logging import get_logger
from narrative.pipeline.models import MarketOverview, MarketStatus, SyncReport
from narrative.storage.models import AssetType, MarketDataCacheEntry

if TYPE_CHECKING:
    from narrative.providers.base import QuoteProvider
    from narrative.providers.twelvedata.models import NormalizedQuote
    from narrative.storage.database import Database

logger = get_logger(__name__)

# Top cryptos by market cap, in rank order (Twelve Data symbols)
CRYPTO_SYMBOLS: tuple[str, ...] = (
    "BTC/USD",
    "ETH/USD",
    "USDT/USD",
    "BNB/USD",
    "SOL/USD",
    "XRP/USD",
    "USDC/USD",
    "ADA/USD",
    "AVAX/USD",
    "DOGE/USD",
    "DOT/USD",
    "TRX/USD",
    "LINK/USD",
    "MATIC/USD",
    "SHIB/USD",
    "LTC/USD",
    "BCH/USD",
    "ATOM/USD",
    "UNI/USD",
    "XLM/USD",
)

# Twelve Data reports crypto names as the pair ("Bitcoin US Dollar"); prefer these
CRYPTO_NAMES: dict[str, str] = {
    "BTC/USD": "Bitcoin",
    "ETH/USD": "Ethereum",
    "USDT/USD": "Tether",
    "BNB/USD": "BNB",
    "SOL/USD": "Solana",
    "XRP/USD": "XRP",
    "USDC/USD": "USD Coin",
    "ADA/USD": "Cardano",
    "AVAX/USD": "Avalanche",
    "DOGE/USD": "Dogecoin",
    "DOT/USD": "Polkadot",
    "TRX/USD": "TRON",
    "LINK/USD": "Chainlink",
    "MATIC/USD": "Polygon",
    "SHIB/USD": "Shiba Inu",
    "LTC/USD": "Litecoin",
    "BCH/USD": "Bitcoin Cash",
    "ATOM/USD": "Cosmos",
    "UNI/USD": "Uniswap",
    "XLM/USD": "Stellar",
}

# Top US stocks by market cap
STOCK_SYMBOLS: tuple[str, ...] = (
    "AAPL",
    "MSFT",
    "GOOGL",
    "AMZN",
    "NVDA",
    "META",
    "TSLA",
    "BRK.B",
    "UNH",
    "LLY",
    "JPM",
    "V",
    "XOM",
    "AVGO",
    "MA",
    "JNJ",
    "PG",
    "HD",
    "COST",
    "MRK",
)

BTC_SYMBOL = "BTC/USD"


def is_stale(
    last_fetched_at: datetime | None,
    now: datetime | None = None,
    threshold_hours: float = MARKET_DATA_STALE_HOURS,
) -> bool:
    """True when there is no cached data or it is older than the threshold."""
    if last_fetched_at is None:
        return True
    now = now or datetime.now(UTC)
    return now - last_fetched_at > timedelta(hours=threshold_hours)


def _to_entry(
    quote: NormalizedQuote,
    asset_type: AssetType,
    rank: int,
    fetched_at: datetime,
) -> MarketDataCacheEntry:
    name = CRYPTO_NAMES.get(quote.symbol, quote.name) if asset_type == "crypto" else quote.name
    return MarketDataCacheEntry.model_validate(
        {
            "symbol": quote.symbol,
            "name": name,
            "asset_type": asset_type,
            "price": quote.price,
            "price_open": quote.price_open,
            "price_high": quote.high,
            "price_low": quote.low,
            "price_previous_close": quote.previous_close,
            "change_24h": quote.change,
            "change_percent_24h": quote.percent_change,
            "volume_24h": quote.volume,
            "market_cap": quote.market_cap,
            "rank": rank,
            "fetched_at": fetched_at,
        }
    )


class MarketDataSync:
    """Refreshes the market data cache from the quote provider."""

    def __init__(
        self,
        db: Database,
        quotes: QuoteProvider,
        batch_size: int = TWELVEDATA_BATCH_SIZE,
        stale_after_hours: float = MARKET_DATA_STALE_HOURS,
        crypto_symbols: tuple[str, ...] = CRYPTO_SYMBOLS,
        stock_symbols: tuple[str, ...] = STOCK_SYMBOLS,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.db = db
        self.quotes = quotes
        self.batch_size = batch_size
        self.stale_after_hours = stale_after_hours
        self.crypto_symbols = crypto_symbols
        self.stock_symbols = stock_symbols
        self._clock = clock

    async def _sync_universe(
        self,
        symbols: tuple[str, ...],
        asset_type: AssetType,
    ) -> tuple[int, int]:
        """Fetch and upsert one universe, stamped when its quotes arrived.

        Returns:
            Tuple of (records_upserted, api_requests_used)
        """
        quotes = await self.quotes.get_quotes_batched(list(symbols), asset_type, self.batch_size)
        requests = math.ceil(len(symbols) / self.batch_size)
        fetched_at = self._clock()

        for i, quote in enumerate(quotes):
            await self.db.upsert_market_data(_to_entry(quote, asset_type, i + 1, fetched_at))

        return len(quotes), requests

    async def run(self) -> SyncReport:
        """Run one full sync.

        Raises:
            MarketSyncError: If any step fails; the sync log is marked failed first
        """
        start = time.monotonic()
        log_id = await self.db.create_sync_log("all")
        records_processed = 0
        api_requests_used = 0
        crypto_count = stock_count = 0

        try:
            crypto_count, requests = await self._sync_universe(self.crypto_symbols, "crypto")
            records_processed += crypto_count
            api_requests_used += requests

            stock_count, requests = await self._sync_universe(self.stock_symbols, "stock")
            records_processed += stock_count
            api_requests_used += requests

            await self.db.complete_sync_log(log_id, records_processed, api_requests_used)
        except Exception as e:
            logger.exception("Market data sync failed", sync_log_id=str(log_id))
            await self.db.fail_sync_log(log_id, records_processed, api_requests_used, str(e))
            raise MarketSyncError(
                str(e),
                records_processed=records_processed,
                api_requests_used=api_requests_used,
            ) from e

        execution_time_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Market data sync complete",
            records_processed=records_processed,
            api_requests_used=api_requests_used,
            crypto_count=crypto_count,
            stock_count=stock_count,
            execution_time_ms=execution_time_ms,
        )
        return SyncReport(
            records_processed=records_processed,
            api_requests_used=api_requests_used,
            execution_time_ms=execution_time_ms,
            crypto_count=crypto_count,
            stock_count=stock_count,
        )

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    async def get_market_status(self, now: datetime | None = None) -> MarketStatus:
        last_fetched_at = await self.db.get_latest_fetched_at()
        return MarketStatus(
            last_fetched_at=last_fetched_at,
            is_stale=is_stale(last_fetched_at, now, self.stale_after_hours),
            stale_after_hours=self.stale_after_hours,
            latest_sync=await self.db.get_latest_sync_log(),
        )

    async def get_market_overview(self, limit: int = 20) -> MarketOverview:
        """Cached cryptos by rank with market-wide aggregates."""
        cryptos = await self.db.get_market_data("crypto", limit)
        latest_sync = await self.db.get_latest_sync_log()
        if not cryptos:
            return MarketOverview(cryptos=[], latest_sync=latest_sync)

        total_market_cap = sum((c.market_cap or Decimal(0) for c in cryptos), Decimal(0))
        total_volume = sum((c.volume_24h or Decimal(0) for c in cryptos), Decimal(0))
        btc = next((c for c in cryptos if c.symbol == BTC_SYMBOL), None)
        btc_dominance = (
            float((btc.market_cap or Decimal(0)) / total_market_cap * 100)
            if btc is not None and total_market_cap > 0
            else 0.0
        )
        last_updated = max(c.fetched_at for c in cryptos)

        return MarketOverview(
            cryptos=cryptos,
            total_market_cap=float(total_market_cap),
            total_volume_24h=float(total_volume),
            btc_dominance=btc_dominance,
            last_updated=last_updated,
            is_stale=is_stale(last_updated, threshold_hours=self.stale_after_hours),
            latest_sync=latest_sync,
        )
