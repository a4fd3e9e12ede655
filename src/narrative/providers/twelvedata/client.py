"""Twelve Data REST client for batched quotes.

- Quote: https://api.twelvedata.com/quote?symbol=BTC/USD,ETH/USD&apikey=...

A single-symbol request returns the quote object itself; a multi-symbol
request returns an object keyed by symbol, where failed symbols carry an
error body (`code`, `message`) instead of a quote.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Any

import httpx
import orjson

from narrative.config import get_settings
from narrative.core.constants import TWELVEDATA_BATCH_SIZE, TWELVEDATA_REQUESTS_PER_MINUTE
from narrative.core.exceptions import (
    ConfigurationError,
    ProviderError,
    QuoteFetchError,
    RateLimitError,
)
from narrative.core.logging import get_logger
from narrative.providers.twelvedata.models import NormalizedQuote
from narrative.storage.models import AssetType

logger = get_logger(__name__)


class RateLimiter:
    """Sliding-window limiter: at most `max_calls` acquisitions per window.

    One instance is shared per process so every client draws from the same
    free-tier allowance.
    """

    def __init__(
        self,
        max_calls: int = TWELVEDATA_REQUESTS_PER_MINUTE,
        window_seconds: float = 60.0,
    ) -> None:
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._calls: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _evict(self, now: float) -> None:
        while self._calls and self._calls[0] <= now - self.window_seconds:
            self._calls.popleft()

    async def acquire(self) -> None:
        """Wait until a call fits in the window, then record it."""
        loop = asyncio.get_running_loop()
        async with self._lock:
            now = loop.time()
            self._evict(now)
            if len(self._calls) >= self.max_calls:
                wait = self._calls[0] + self.window_seconds - now
                logger.debug("Twelve Data window full, waiting", wait_seconds=round(wait, 2))
                await asyncio.sleep(wait)
                now = loop.time()
                self._evict(now)
            self._calls.append(now)


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get the process-wide Twelve Data rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(get_settings().twelvedata_requests_per_minute)
    return _rate_limiter


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_quote(raw: dict[str, Any]) -> NormalizedQuote | None:
    """Convert a raw /quote object, or None if it lacks a symbol or close."""
    symbol = raw.get("symbol")
    price = _to_float(raw.get("close"))
    if not symbol or price is None:
        return None
    return NormalizedQuote(
        symbol=symbol,
        name=raw.get("name") or symbol,
        price=price,
        price_open=_to_float(raw.get("open")),
        high=_to_float(raw.get("high")),
        low=_to_float(raw.get("low")),
        previous_close=_to_float(raw.get("previous_close")),
        change=_to_float(raw.get("change")),
        percent_change=_to_float(raw.get("percent_change")),
        volume=_to_float(raw.get("volume")),
        exchange=raw.get("exchange"),
    )


class TwelveDataClient:
    """Client for Twelve Data quotes.

    Usage:
        client = TwelveDataClient(api_key="your_key")
        quotes = await client.get_quotes_batched(["AAPL", "MSFT"], "stock")
        await client.close()
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        settings = get_settings()
        if api_key is None and settings.twelvedata_api_key is not None:
            api_key = settings.twelvedata_api_key.get_secret_value()
        self._api_key = api_key
        self._base_url = (base_url or settings.twelvedata_api_url).rstrip("/")
        self._rate_limiter = rate_limiter
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise ConfigurationError("TWELVEDATA_API_KEY is not configured")
        return self._api_key

    async def _request_quotes(self, symbols: list[str], api_key: str) -> dict[str, Any]:
        """GET /quote for one batch.

        Raises:
            RateLimitError: On HTTP 429 or an exhausted-credits error body
            QuoteFetchError: On any other HTTP, transport or payload failure
        """
        client = self._get_http_client()
        try:
            response = await client.get(
                f"{self._base_url}/quote",
                params={"symbol": ",".join(symbols), "apikey": api_key},
            )
            response.raise_for_status()
            data = orjson.loads(response.content)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                raise RateLimitError("Twelve Data rate limit exceeded") from e
            raise QuoteFetchError(f"Twelve Data HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, orjson.JSONDecodeError) as e:
            raise QuoteFetchError(f"Twelve Data request failed: {e}") from e

        if not isinstance(data, dict):
            raise QuoteFetchError("Unexpected Twelve Data response shape")
        if data.get("status") == "error":
            message = f"Twelve Data error {data.get('code')}: {data.get('message')}"
            if data.get("code") == 429:
                raise RateLimitError(message)
            raise QuoteFetchError(message)
        return data

    async def get_quotes(self, symbols: list[str]) -> list[NormalizedQuote]:
        """Fetch quotes for up to one batch of symbols in a single request.

        Returns:
            Quotes for the symbols the provider could price. Provider errors
            and per-symbol errors yield fewer quotes rather than raising.

        Raises:
            ConfigurationError: If no API key is configured
        """
        api_key = self._require_api_key()
        if not symbols:
            return []

        await (self._rate_limiter or get_rate_limiter()).acquire()

        try:
            data = await self._request_quotes(symbols, api_key)
        except ProviderError as e:
            logger.warning(
                "Twelve Data batch dropped",
                symbols=symbols,
                error=e.message,
                rate_limited=isinstance(e, RateLimitError),
            )
            return []

        raw_quotes: list[dict[str, Any]]
        if len(symbols) == 1:
            raw_quotes = [data]
        else:
            raw_quotes = []
            for symbol in symbols:
                entry = data.get(symbol)
                if not isinstance(entry, dict):
                    continue
                if "code" in entry:
                    logger.debug(
                        "Twelve Data symbol error",
                        symbol=symbol,
                        message=entry.get("message"),
                    )
                    continue
                raw_quotes.append(entry)

        quotes = [q for q in (normalize_quote(raw) for raw in raw_quotes) if q is not None]
        if len(quotes) < len(symbols):
            logger.debug("Partial quote batch", requested=len(symbols), received=len(quotes))
        return quotes

    async def get_quotes_batched(
        self,
        symbols: list[str],
        asset_type: AssetType,
        batch_size: int = TWELVEDATA_BATCH_SIZE,
    ) -> list[NormalizedQuote]:
        """Fetch quotes for any number of symbols, `batch_size` per request.

        Quotes are returned in request order so callers can rank by position.
        """
        quotes: list[NormalizedQuote] = []
        for start in range(0, len(symbols), batch_size):
            batch = symbols[start : start + batch_size]
            quotes.extend(await self.get_quotes(batch))

        logger.info(
            "Quotes fetched",
            asset_type=asset_type,
            requested=len(symbols),
            received=len(quotes),
        )
        return quotes

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
