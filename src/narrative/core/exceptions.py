"""Custom exceptions for Narrative."""


class NarrativeError(Exception):
    """Base exception for all Narrative errors."""

    def __init__(self, message: str, *args: object) -> None:
        self.message = message
        super().__init__(message, *args)


class ConfigurationError(NarrativeError):
    """Required configuration (API key, secret) is missing."""


# Provider errors
class ProviderError(NarrativeError):
    """Base error for external data providers."""


class NewsFetchError(ProviderError):
    """News search failed or returned an invalid payload."""


class QuoteFetchError(ProviderError):
    """Quote request failed."""


class RateLimitError(ProviderError):
    """Provider rejected the request with a rate limit response."""


# Processing errors
class ProcessingError(NarrativeError):
    """Base error for processing layer."""


class LLMError(ProcessingError):
    """LLM API call failed."""


# Pipeline errors
class PipelineError(NarrativeError):
    """Base error for pipeline jobs."""


class MarketSyncError(PipelineError):
    """Market data sync aborted; the sync log was marked failed."""

    def __init__(
        self,
        message: str,
        records_processed: int = 0,
        api_requests_used: int = 0,
    ) -> None:
        super().__init__(message)
        self.records_processed = records_processed
        self.api_requests_used = api_requests_used


# Storage errors
class StorageError(NarrativeError):
    """Base error for storage layer."""


class DatabaseConnectionError(StorageError):
    """Failed to connect to database."""


class RedisConnectionError(StorageError):
    """Failed to connect to Redis."""


# API errors
class AuthenticationError(NarrativeError):
    """Trigger or admin credential missing or wrong."""
