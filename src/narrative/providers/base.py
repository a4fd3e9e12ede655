"""Provider protocols consumed by the pipeline.

Provider Types:
- NewsProvider: Recent headlines for a ticker (feeds the sentiment worker)
- QuoteProvider: Batched quotes for a symbol universe (feeds the market sync)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from narrative.providers.twelvedata.models import NormalizedQuote
    from narrative.providers.yahoo.models import NewsItem
    from narrative.storage.models import AssetType


@runtime_checkable
class NewsProvider(Protocol):
    """Protocol for ticker news search."""

    async def search_news(self, ticker: str, count: int = 5) -> list[NewsItem]:
        """Get the most recent news items for a ticker.

        Raises:
            NewsFetchError: If the provider call fails or the payload is invalid
        """
        ...


@runtime_checkable
class QuoteProvider(Protocol):
    """Protocol for batched quote retrieval."""

    async def get_quotes_batched(
        self,
        symbols: list[str],
        asset_type: AssetType,
        batch_size: int = 8,
    ) -> list[NormalizedQuote]:
        """Get quotes for all symbols, in batches.

        Partial results are returned rather than raised; symbols the provider
        could not quote are simply missing from the result.
        """
        ...
