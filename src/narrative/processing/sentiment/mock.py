"""Deterministic mock scorer used when LLM mocking is enabled.

Output depends only on the asset name and the current UTC hour, so repeated
calls within the same hour agree while different hours rotate templates.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from narrative.processing.sentiment.models import SentimentAnalysis

DEFAULT_MOCK = SentimentAnalysis(
    sentiment_score=0.65,
    reasoning=(
        "Strong earnings beat expectations with positive guidance. Market fundamentals "
        "remain solid with increased institutional interest."
    ),
    key_topics=["earnings beat", "positive guidance", "institutional buying"],
)

MOCK_TEMPLATES: tuple[SentimentAnalysis, ...] = (
    DEFAULT_MOCK,
    SentimentAnalysis(
        sentiment_score=0.35,
        reasoning=(
            "Mixed results with revenue growth offset by margin pressure. Market awaits "
            "clarity on future direction."
        ),
        key_topics=["revenue growth", "margin pressure", "market uncertainty"],
    ),
    SentimentAnalysis(
        sentiment_score=-0.25,
        reasoning=(
            "Concerns mount over sector headwinds and competitive pressures. Recent news "
            "suggests cautious near-term outlook."
        ),
        key_topics=["sector headwinds", "competition", "cautious outlook"],
    ),
    SentimentAnalysis(
        sentiment_score=0.8,
        reasoning=(
            "Exceptional momentum driven by breakthrough developments and expanding market "
            "opportunity. Bulls firmly in control."
        ),
        key_topics=["breakthrough", "market expansion", "bullish momentum"],
    ),
    SentimentAnalysis(
        sentiment_score=-0.5,
        reasoning=(
            "Significant challenges ahead with regulatory scrutiny and market share losses. "
            "Defensive positioning recommended."
        ),
        key_topics=["regulatory risk", "market share loss", "defensive stance"],
    ),
    SentimentAnalysis(
        sentiment_score=0.15,
        reasoning=(
            "Stable but unexciting outlook. Company executing steadily without major "
            "catalysts on the horizon."
        ),
        key_topics=["stable operations", "limited catalysts", "steady execution"],
    ),
)


def name_hash(name: str) -> int:
    """32-bit signed rolling hash (h * 31 + c) of a string."""
    h = 0
    for ch in name:
        h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
    return h - 0x1_0000_0000 if h & 0x8000_0000 else h


def hour_bucket(now: datetime) -> int:
    """Hours since the Unix epoch."""
    return int(now.timestamp() // 3600)


def select_template(asset_name: str, now: datetime) -> SentimentAnalysis:
    index = abs(name_hash(asset_name) + hour_bucket(now)) % len(MOCK_TEMPLATES)
    return MOCK_TEMPLATES[index]


def generate_mock_response(asset_name: str, now: datetime | None = None) -> SentimentAnalysis:
    """Build the mock analysis for an asset at a point in time."""
    template = select_template(asset_name, now or datetime.now(UTC))
    return SentimentAnalysis(
        sentiment_score=template.sentiment_score,
        reasoning=f"[MOCK] {asset_name}: {template.reasoning}",
        key_topics=list(template.key_topics),
    )


class MockSentimentScorer:
    """SentimentScorer that never calls an external service."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    async def score(self, asset_name: str, context: str) -> SentimentAnalysis:
        return generate_mock_response(asset_name, self._clock())
