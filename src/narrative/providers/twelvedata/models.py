"""Pydantic models for Twelve Data quotes."""

from __future__ import annotations

from pydantic import BaseModel


class NormalizedQuote(BaseModel):
    """Quote reduced to the fields the market data cache stores.

    Twelve Data sends numbers as strings; they are parsed here. Market cap
    is not part of the /quote payload and stays None.
    """

    symbol: str
    name: str
    price: float
    price_open: float | None = None
    high: float | None = None
    low: float | None = None
    previous_close: float | None = None
    change: float | None = None
    percent_change: float | None = None
    volume: float | None = None
    market_cap: float | None = None
    exchange: str | None = None
