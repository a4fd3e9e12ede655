"""Application-wide constants.

These are fixed values that don't change between environments.
For configurable values, see config.py Settings.
"""

# ─────────────────────────────────────────────────────────────
# Redis key schema
# ─────────────────────────────────────────────────────────────
QUEUE_KEY = "narrative:queue"  # List: pending tickers (LPUSH in, RPOP out)
PROCESSING_SET_KEY = "narrative:processing"  # Set: in-flight tickers
MOCK_SETTINGS_KEY = "narrative:mock_settings"  # String (JSON), no TTL
TICKER_SEARCH_CACHE_PREFIX = "narrative:yahoo:search"

# ─────────────────────────────────────────────────────────────
# Pipeline limits (external constraints)
# ─────────────────────────────────────────────────────────────
WORKER_TIME_BUDGET_SECONDS = 50.0  # Leaves headroom under a 60s serverless limit
DEFAULT_NEWS_COUNT = 5
MARKET_DATA_STALE_HOURS = 25.0  # Daily sync + 1h grace

# ─────────────────────────────────────────────────────────────
# API Rate Limits (external constraints)
# ─────────────────────────────────────────────────────────────
TWELVEDATA_BATCH_SIZE = 8  # Free tier: max symbols per /quote call
TWELVEDATA_REQUESTS_PER_MINUTE = 8  # Free tier limit

# ─────────────────────────────────────────────────────────────
# Cache TTLs
# ─────────────────────────────────────────────────────────────
TICKER_SEARCH_FRESH_SECONDS = 60  # Served from cache without a request
TICKER_SEARCH_CACHE_TTL_SECONDS = 86400  # Kept as stale fallback on rate limits

# ─────────────────────────────────────────────────────────────
# API URL Defaults (used as defaults in Settings)
# ─────────────────────────────────────────────────────────────
DEFAULT_TWELVEDATA_API_URL = "https://api.twelvedata.com"
DEFAULT_YAHOO_SEARCH_URL = "https://query2.finance.yahoo.com/v1/finance/search"
