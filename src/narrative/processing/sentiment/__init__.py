"""Asset sentiment scoring.

Two interchangeable scorers share the `SentimentScorer` protocol:
- LLMSentimentScorer: PydanticAI agent with the analyst persona
- MockSentimentScorer: deterministic templates keyed by asset and hour
"""

from narrative.processing.sentiment.analyzer import LLMSentimentScorer
from narrative.processing.sentiment.mock import MockSentimentScorer, generate_mock_response
from narrative.processing.sentiment.models import SentimentAnalysis, SentimentScorer

__all__ = [
    "LLMSentimentScorer",
    "MockSentimentScorer",
    "SentimentAnalysis",
    "SentimentScorer",
    "generate_mock_response",
]
