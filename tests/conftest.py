"""Pytest fixtures and configuration."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from narrative.storage.models import Asset


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests by default unless -m integration is specified."""
    markexpr = config.getoption("-m", default="")
    if "integration" in markexpr:
        return

    skip_integration = pytest.mark.skip(reason="Integration test - run with: pytest -m integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def _encode(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode()


@pytest.fixture
def mock_redis() -> Any:
    """Create mock Redis with stateful list/set/string behavior.

    Values are stored and returned as bytes, like a client created with
    decode_responses=False.

    Internal state attributes:
        _test_lists: Dict of list key -> list of values (index 0 is the head)
        _test_sets: Dict of set key -> set of values
        _test_strings: Dict of string key -> value
        _test_ttls: Dict of string key -> expiry seconds passed to SET
    """
    redis = AsyncMock()

    _test_lists: dict[str, list[bytes]] = {}
    _test_sets: dict[str, set[bytes]] = {}
    _test_strings: dict[str, bytes] = {}
    _test_ttls: dict[str, int | None] = {}

    redis._test_lists = _test_lists
    redis._test_sets = _test_sets
    redis._test_strings = _test_strings
    redis._test_ttls = _test_ttls

    async def mock_sadd(key: str, *members: Any) -> int:
        target = _test_sets.setdefault(key, set())
        added = 0
        for member in members:
            encoded = _encode(member)
            if encoded not in target:
                target.add(encoded)
                added += 1
        return added

    async def mock_srem(key: str, *members: Any) -> int:
        target = _test_sets.get(key, set())
        removed = 0
        for member in members:
            encoded = _encode(member)
            if encoded in target:
                target.discard(encoded)
                removed += 1
        return removed

    async def mock_scard(key: str) -> int:
        return len(_test_sets.get(key, set()))

    async def mock_sismember(key: str, member: Any) -> bool:
        return _encode(member) in _test_sets.get(key, set())

    async def mock_lpush(key: str, *values: Any) -> int:
        target = _test_lists.setdefault(key, [])
        for value in values:
            target.insert(0, _encode(value))
        return len(target)

    async def mock_rpop(key: str) -> bytes | None:
        target = _test_lists.get(key)
        if not target:
            return None
        return target.pop()

    async def mock_llen(key: str) -> int:
        return len(_test_lists.get(key, []))

    async def mock_get(key: str) -> bytes | None:
        return _test_strings.get(key)

    async def mock_set(key: str, value: Any, ex: int | None = None, **kwargs: Any) -> bool:
        _test_strings[key] = _encode(value)
        _test_ttls[key] = ex
        return True

    async def mock_ping() -> bool:
        return True

    redis.sadd = mock_sadd
    redis.srem = mock_srem
    redis.scard = mock_scard
    redis.sismember = mock_sismember
    redis.lpush = mock_lpush
    redis.rpop = mock_rpop
    redis.llen = mock_llen
    redis.get = mock_get
    redis.set = mock_set
    redis.ping = mock_ping

    return redis


@pytest.fixture
def mock_db() -> Any:
    """Create mock Database with in-memory assets, sentiment log and market cache.

    Internal state attributes:
        _test_assets: Dict of symbol -> Asset
        _test_sentiment: List of (asset_id, score, summary) tuples
        _test_market: Dict of symbol -> MarketDataCacheEntry
        _test_sync_logs: Dict of sync log id -> dict of column -> value
    """
    db = AsyncMock()

    _test_assets: dict[str, Asset] = {}
    _test_sentiment: list[tuple[UUID, str, str | None]] = []
    _test_market: dict[str, Any] = {}
    _test_sync_logs: dict[UUID, dict[str, Any]] = {}

    db._test_assets = _test_assets
    db._test_sentiment = _test_sentiment
    db._test_market = _test_market
    db._test_sync_logs = _test_sync_logs

    async def mock_list_assets() -> list[Asset]:
        return list(_test_assets.values())

    async def mock_get_asset_by_symbol(symbol: str) -> Asset | None:
        return _test_assets.get(symbol)

    async def mock_insert_sentiment_log(asset_id: UUID, score: str, summary: str | None) -> UUID:
        _test_sentiment.append((asset_id, score, summary))
        return uuid4()

    async def mock_upsert_market_data(entry: Any) -> bool:
        is_new = entry.symbol not in _test_market
        _test_market[entry.symbol] = entry
        return is_new

    async def mock_create_sync_log(sync_type: str) -> UUID:
        log_id = uuid4()
        _test_sync_logs[log_id] = {
            "sync_type": sync_type,
            "status": "running",
            "started_at": datetime.now(UTC),
        }
        return log_id

    async def mock_complete_sync_log(
        log_id: UUID, records_processed: int, api_requests_used: int
    ) -> None:
        _test_sync_logs[log_id].update(
            status="completed",
            records_processed=records_processed,
            api_requests_used=api_requests_used,
        )

    async def mock_fail_sync_log(
        log_id: UUID, records_processed: int, api_requests_used: int, error_message: str
    ) -> None:
        _test_sync_logs[log_id].update(
            status="failed",
            records_processed=records_processed,
            api_requests_used=api_requests_used,
            error_message=error_message,
        )

    db.list_assets = mock_list_assets
    db.get_asset_by_symbol = mock_get_asset_by_symbol
    db.insert_sentiment_log = mock_insert_sentiment_log
    db.upsert_market_data = mock_upsert_market_data
    db.create_sync_log = mock_create_sync_log
    db.complete_sync_log = mock_complete_sync_log
    db.fail_sync_log = mock_fail_sync_log
    db.get_latest_sync_log = AsyncMock(return_value=None)

    return db


@pytest.fixture
def add_asset(mock_db: Any) -> Any:
    """Register an asset in the mock database and return it."""

    def _add(symbol: str, name: str | None = None) -> Asset:
        asset = Asset(id=uuid4(), symbol=symbol, name=name or symbol)
        mock_db._test_assets[symbol] = asset
        return asset

    return _add
