"""Data models for asset sentiment scoring."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


class SentimentAnalysis(BaseModel):
    """Structured scorer output (same schema for the LLM and the mock)."""

    sentiment_score: float = Field(
        ge=-1.0,
        le=1.0,
        description="Sentiment score from -1 (Bearish) to 1 (Bullish)",
    )
    reasoning: str = Field(description="Why this sentiment?")
    key_topics: list[str] = Field(
        default_factory=list,
        description="Key topics extracted from the news",
    )

    @property
    def formatted_score(self) -> str:
        """Score with two decimals, matching the NUMERIC(5,2) column."""
        return f"{self.sentiment_score:.2f}"


@runtime_checkable
class SentimentScorer(Protocol):
    """Scores an asset from a block of news context.

    Implementations must raise on provider errors rather than return a
    degraded result.
    """

    async def score(self, asset_name: str, context: str) -> SentimentAnalysis: ...
