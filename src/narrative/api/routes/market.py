"""Market data cache read endpoints."""

from fastapi import APIRouter, Query

from narrative.core.dependencies import MarketSyncDep
from narrative.pipeline.models import MarketOverview, MarketStatus

router = APIRouter()


@router.get("/status", response_model=MarketStatus)
async def market_status(market_sync: MarketSyncDep) -> MarketStatus:
    """Cache freshness and the most recent sync log entry."""
    return await market_sync.get_market_status()


@router.get("/cryptos", response_model=MarketOverview)
async def market_cryptos(
    market_sync: MarketSyncDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> MarketOverview:
    return await market_sync.get_market_overview(limit)
