"""Twelve Data provider for batched quotes.

Free tier: 8 requests/minute, up to 8 symbols per /quote request.
"""

from narrative.providers.twelvedata.client import (
    RateLimiter,
    TwelveDataClient,
    get_rate_limiter,
    normalize_quote,
)
from narrative.providers.twelvedata.models import NormalizedQuote

__all__ = [
    "NormalizedQuote",
    "RateLimiter",
    "TwelveDataClient",
    "get_rate_limiter",
    "normalize_quote",
]
