"""Per-asset sentiment history."""

from fastapi import APIRouter, HTTPException, Query

from narrative.core.dependencies import DbDep
from narrative.storage.models import SentimentRecord

router = APIRouter()


@router.get("/{symbol:path}/sentiment", response_model=list[SentimentRecord])
async def sentiment_history(
    symbol: str,
    db: DbDep,
    limit: int = Query(default=30, ge=1, le=500),
) -> list[SentimentRecord]:
    """Sentiment records for an asset, newest first."""
    if await db.get_asset_by_symbol(symbol) is None:
        raise HTTPException(status_code=404, detail=f"Unknown asset: {symbol}")
    return await db.get_sentiment_history(symbol, limit)
