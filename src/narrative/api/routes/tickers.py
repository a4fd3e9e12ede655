"""Ticker search endpoint.

Tracked assets matching the query come first, then Yahoo Finance matches
for symbols not already listed.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel

from narrative.core.dependencies import DbDep, YahooClientDep
from narrative.providers.yahoo import TickerSearchResult
from narrative.storage.models import Asset

router = APIRouter()


class TickerMatch(BaseModel):
    symbol: str
    name: str
    quote_type: str
    exchange: str | None = None
    is_local: bool = False


def merge_ticker_matches(
    local: list[Asset],
    remote: list[TickerSearchResult],
    limit: int,
) -> list[TickerMatch]:
    matches = [
        TickerMatch(symbol=a.symbol, name=a.name, quote_type="SAVED", is_local=True) for a in local
    ]
    seen = {m.symbol for m in matches}
    matches += [
        TickerMatch(**r.model_dump(), is_local=False) for r in remote if r.symbol not in seen
    ]
    return matches[:limit]


@router.get("/search", response_model=list[TickerMatch])
async def search_tickers(
    db: DbDep,
    client: YahooClientDep,
    q: str = Query(..., min_length=1, max_length=50, description="Ticker or company name"),
    limit: int = Query(default=10, ge=1, le=20),
) -> list[TickerMatch]:
    local = await db.search_assets(q, limit)
    remote = await client.search_tickers(q)
    return merge_ticker_matches(local, remote, limit)
