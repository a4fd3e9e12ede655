"""Pydantic models for Yahoo Finance search data."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

VALID_QUOTE_TYPES = frozenset(
    {"EQUITY", "ETF", "MUTUALFUND", "CRYPTOCURRENCY", "CURRENCY", "INDEX", "FUTURE"}
)


class NewsItem(BaseModel):
    """A single news headline from the search endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    title: str
    link: str
    published_at: datetime = Field(alias="providerPublishTime")  # epoch seconds on the wire
    publisher: str | None = None


class TickerSearchResult(BaseModel):
    """A quote match from ticker search."""

    symbol: str
    name: str
    quote_type: str
    exchange: str | None = None
