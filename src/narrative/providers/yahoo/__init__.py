"""Yahoo Finance search provider for news and ticker lookup.

Uses the public search endpoint; no API key required.
"""

from narrative.providers.yahoo.client import YahooFinanceClient
from narrative.providers.yahoo.models import NewsItem, TickerSearchResult

__all__ = [
    "NewsItem",
    "TickerSearchResult",
    "YahooFinanceClient",
]
