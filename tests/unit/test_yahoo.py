"""Tests for the Yahoo Finance search provider."""

from __future__ import annotations

import time
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import orjson
import pytest

from narrative.core.constants import TICKER_SEARCH_CACHE_PREFIX, TICKER_SEARCH_CACHE_TTL_SECONDS
from narrative.core.exceptions import NewsFetchError
from narrative.providers.yahoo.client import YahooFinanceClient

# ---------------------------------------------------------------------------
# Sample Data
# ---------------------------------------------------------------------------

SAMPLE_SEARCH_RESPONSE = {
    "quotes": [
        {
            "symbol": "AAPL",
            "shortname": "Apple Inc.",
            "longname": "Apple Inc.",
            "quoteType": "EQUITY",
            "exchange": "NMS",
            "exchDisp": "NASDAQ",
        },
        {
            "symbol": "AAPL240621C00150000",
            "shortname": "AAPL Jun 2024 150 call",
            "quoteType": "OPTION",
            "exchange": "OPR",
        },
        {
            "symbol": "APLE",
            "longname": "Apple Hospitality REIT, Inc.",
            "quoteType": "EQUITY",
            "exchange": "NYQ",
        },
    ],
    "news": [
        {
            "uuid": "a1",
            "title": "Apple unveils new chip",
            "publisher": "Reuters",
            "link": "https://example.com/a1",
            "providerPublishTime": 1714567200,
        },
        {
            "uuid": "a2",
            "title": "Apple faces EU fine",
            "publisher": "Bloomberg",
            "link": "https://example.com/a2",
            "providerPublishTime": 1714563600,
        },
    ],
}


def _response(payload: Any) -> MagicMock:
    response = MagicMock()
    response.content = orjson.dumps(payload)
    response.raise_for_status = MagicMock()
    return response


def _status_error(status: int) -> MagicMock:
    response = MagicMock()
    response.raise_for_status = MagicMock(
        side_effect=httpx.HTTPStatusError(
            f"HTTP {status}",
            request=httpx.Request("GET", "https://yahoo.test/search"),
            response=httpx.Response(status),
        )
    )
    return response


@pytest.fixture
def client(mock_redis: Any) -> YahooFinanceClient:
    return YahooFinanceClient(redis=mock_redis, search_url="https://yahoo.test/search")


def _cache(mock_redis: Any, query: str, cached_at: float, symbols: list[str]) -> None:
    payload = {
        "cached_at": cached_at,
        "results": [
            {"symbol": s, "name": s, "quote_type": "EQUITY", "exchange": None} for s in symbols
        ],
    }
    mock_redis._test_strings[f"{TICKER_SEARCH_CACHE_PREFIX}:{query}"] = orjson.dumps(payload)


class TestSearchNews:
    """Tests for YahooFinanceClient.search_news."""

    async def test_returns_news_items(self, client: YahooFinanceClient) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response(SAMPLE_SEARCH_RESPONSE))
            items = await client.search_news("AAPL", count=5)

        assert [i.title for i in items] == ["Apple unveils new chip", "Apple faces EU fine"]
        assert items[0].uuid == "a1"
        assert items[0].published_at.year == 2024
        _, kwargs = mock_http.return_value.get.call_args
        assert kwargs["params"] == {"q": "AAPL", "newsCount": 5, "quotesCount": 0}

    async def test_truncates_to_count(self, client: YahooFinanceClient) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response(SAMPLE_SEARCH_RESPONSE))
            items = await client.search_news("AAPL", count=1)

        assert len(items) == 1

    async def test_no_news_key(self, client: YahooFinanceClient) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response({"quotes": []}))
            items = await client.search_news("ZZZZ")

        assert items == []

    async def test_http_error_raises(self, client: YahooFinanceClient) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_status_error(500))
            with pytest.raises(NewsFetchError, match="Yahoo Finance Search Failed for AAPL"):
                await client.search_news("AAPL")

    async def test_invalid_item_raises(self, client: YahooFinanceClient) -> None:
        payload = {"news": [{"uuid": "x", "title": "missing link and time"}]}

        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response(payload))
            with pytest.raises(NewsFetchError):
                await client.search_news("AAPL")


class TestSearchTickers:
    """Tests for YahooFinanceClient.search_tickers."""

    async def test_filters_quote_types_and_caches(
        self, client: YahooFinanceClient, mock_redis: Any
    ) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response(SAMPLE_SEARCH_RESPONSE))
            results = await client.search_tickers("Apple")

        assert [r.symbol for r in results] == ["AAPL", "APLE"]
        assert results[0].name == "Apple Inc."
        assert results[0].exchange == "NASDAQ"
        assert results[1].name == "Apple Hospitality REIT, Inc."

        key = f"{TICKER_SEARCH_CACHE_PREFIX}:apple"
        assert key in mock_redis._test_strings
        assert mock_redis._test_ttls[key] == TICKER_SEARCH_CACHE_TTL_SECONDS

    async def test_fresh_cache_skips_request(
        self, client: YahooFinanceClient, mock_redis: Any
    ) -> None:
        _cache(mock_redis, "apple", time.time(), ["AAPL"])

        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock()
            results = await client.search_tickers("Apple")

        assert [r.symbol for r in results] == ["AAPL"]
        mock_http.return_value.get.assert_not_called()

    async def test_expired_cache_refetches(
        self, client: YahooFinanceClient, mock_redis: Any
    ) -> None:
        _cache(mock_redis, "apple", time.time() - 3600, ["OLD"])

        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_response(SAMPLE_SEARCH_RESPONSE))
            results = await client.search_tickers("apple")

        assert [r.symbol for r in results] == ["AAPL", "APLE"]

    async def test_rate_limited_returns_stale_cache(
        self, client: YahooFinanceClient, mock_redis: Any
    ) -> None:
        _cache(mock_redis, "apple", time.time() - 3600, ["AAPL"])

        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_status_error(429))
            results = await client.search_tickers("apple")

        assert [r.symbol for r in results] == ["AAPL"]

    async def test_rate_limited_without_cache_returns_empty(
        self, client: YahooFinanceClient
    ) -> None:
        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(return_value=_status_error(429))
            results = await client.search_tickers("apple")

        assert results == []

    async def test_other_errors_return_empty(
        self, client: YahooFinanceClient, mock_redis: Any
    ) -> None:
        _cache(mock_redis, "apple", time.time() - 3600, ["AAPL"])

        with patch.object(client, "_get_http_client") as mock_http:
            mock_http.return_value.get = AsyncMock(side_effect=httpx.ConnectError("refused"))
            results = await client.search_tickers("apple")

        assert results == []

    async def test_blank_query(self, client: YahooFinanceClient) -> None:
        assert await client.search_tickers("   ") == []
