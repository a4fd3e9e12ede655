"""External data providers.

- **yahoo**: news search and ticker search (no API key)
- **twelvedata**: batched quotes for the market data sync
"""

from narrative.providers.base import NewsProvider, QuoteProvider
from narrative.providers.twelvedata import NormalizedQuote, TwelveDataClient
from narrative.providers.yahoo import NewsItem, TickerSearchResult, YahooFinanceClient

__all__ = [
    "NewsItem",
    "NewsProvider",
    "NormalizedQuote",
    "QuoteProvider",
    "TickerSearchResult",
    "TwelveDataClient",
    "YahooFinanceClient",
]
