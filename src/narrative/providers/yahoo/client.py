"""Yahoo Finance search client.

Free endpoint, no key required:
- Search: https://query2.finance.yahoo.com/v1/finance/search?q=AAPL&newsCount=5

The same endpoint answers both news lookups (worker) and ticker lookups
(search surface). Ticker results are cached in Redis; the search endpoint
rate limits aggressively, so an expired cache entry is kept as a fallback.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import httpx
import orjson
from pydantic import ValidationError

from narrative.config import get_settings
from narrative.core.constants import (
    DEFAULT_NEWS_COUNT,
    TICKER_SEARCH_CACHE_PREFIX,
    TICKER_SEARCH_CACHE_TTL_SECONDS,
    TICKER_SEARCH_FRESH_SECONDS,
)
from narrative.core.exceptions import NewsFetchError, RateLimitError
from narrative.core.logging import get_logger
from narrative.providers.yahoo.models import VALID_QUOTE_TYPES, NewsItem, TickerSearchResult

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


class YahooFinanceClient:
    """Client for the Yahoo Finance search endpoint.

    Usage:
        client = YahooFinanceClient(redis=redis_client)
        news = await client.search_news("AAPL")
        matches = await client.search_tickers("apple")
        await client.close()
    """

    def __init__(self, redis: Redis | None = None, search_url: str | None = None) -> None:
        self._redis = redis
        self._search_url = search_url or get_settings().yahoo_search_url
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=15.0,
                headers={
                    "User-Agent": "Mozilla/5.0 (compatible; Narrative/1.0)",
                    "Accept": "application/json",
                },
            )
        return self._http_client

    async def _search(self, params: dict[str, str | int]) -> dict[str, Any]:
        client = self._get_http_client()
        response = await client.get(self._search_url, params=params)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError("Yahoo Finance search rate limited") from e
            raise
        data = orjson.loads(response.content)
        if not isinstance(data, dict):
            raise ValueError("Unexpected search response shape")
        return data

    async def search_news(self, ticker: str, count: int = DEFAULT_NEWS_COUNT) -> list[NewsItem]:
        """Get the most recent news items for a ticker.

        Args:
            ticker: Ticker symbol (e.g., "AAPL")
            count: Maximum number of items to return

        Returns:
            News items as returned by the provider (may be empty)

        Raises:
            NewsFetchError: On HTTP failure or an invalid payload
        """
        try:
            data = await self._search({"q": ticker, "newsCount": count, "quotesCount": 0})
            items = [NewsItem.model_validate(item) for item in data.get("news") or []]
        except (
            RateLimitError,
            httpx.HTTPError,
            orjson.JSONDecodeError,
            ValidationError,
            ValueError,
        ) as e:
            raise NewsFetchError(f"Yahoo Finance Search Failed for {ticker}: {e}") from e

        logger.debug("News fetched", ticker=ticker, count=len(items))
        return items[:count]

    # -------------------------------------------------------------------------
    # Ticker search
    # -------------------------------------------------------------------------

    def _cache_key(self, query: str) -> str:
        return f"{TICKER_SEARCH_CACHE_PREFIX}:{query.strip().lower()}"

    async def _get_cached(self, key: str) -> tuple[float, list[TickerSearchResult]] | None:
        if self._redis is None:
            return None
        cached = await self._redis.get(key)
        if not cached:
            return None
        try:
            payload = orjson.loads(cached)
            results = [TickerSearchResult.model_validate(r) for r in payload["results"]]
            return float(payload["cached_at"]), results
        except (orjson.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.warning("Cache deserialization failed", key=key, error=str(e))
            return None

    async def _set_cached(self, key: str, results: list[TickerSearchResult]) -> None:
        if self._redis is None:
            return
        payload = {"cached_at": time.time(), "results": [r.model_dump() for r in results]}
        await self._redis.set(key, orjson.dumps(payload), ex=TICKER_SEARCH_CACHE_TTL_SECONDS)

    async def search_tickers(self, query: str, limit: int = 10) -> list[TickerSearchResult]:
        """Search for tickers matching a query.

        Results younger than a minute are served from cache. When the
        provider answers 429 the last cached result is returned even if it
        has expired; any other failure yields an empty list.
        """
        query = query.strip()
        if not query:
            return []

        key = self._cache_key(query)
        cached = await self._get_cached(key)
        if cached is not None and time.time() - cached[0] < TICKER_SEARCH_FRESH_SECONDS:
            return cached[1]

        try:
            data = await self._search({"q": query, "quotesCount": limit, "newsCount": 0})
        except RateLimitError:
            logger.warning(
                "Ticker search rate limited", query=query, stale_cache=cached is not None
            )
            return cached[1] if cached is not None else []
        except httpx.HTTPStatusError as e:
            logger.warning("Ticker search failed", query=query, status=e.response.status_code)
            return []
        except Exception as e:
            logger.warning("Ticker search failed", query=query, error=str(e))
            return []

        results: list[TickerSearchResult] = []
        for quote in data.get("quotes") or []:
            symbol = quote.get("symbol")
            quote_type = quote.get("quoteType")
            if not symbol or quote_type not in VALID_QUOTE_TYPES:
                continue
            results.append(
                TickerSearchResult(
                    symbol=symbol,
                    name=quote.get("shortname") or quote.get("longname") or symbol,
                    quote_type=quote_type,
                    exchange=quote.get("exchDisp") or quote.get("exchange"),
                )
            )

        await self._set_cached(key, results)
        return results

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
