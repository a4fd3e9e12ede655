"""Tests for the deterministic mock scorer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from narrative.processing.sentiment.mock import (
    MOCK_TEMPLATES,
    MockSentimentScorer,
    generate_mock_response,
    hour_bucket,
    name_hash,
    select_template,
)

NOW = datetime(2024, 5, 1, 14, 30, tzinfo=UTC)


class TestNameHash:
    """Tests for the 32-bit string hash."""

    def test_empty(self) -> None:
        assert name_hash("") == 0

    def test_single_char(self) -> None:
        assert name_hash("A") == 65

    def test_known_value(self) -> None:
        # 97*31^2 + 98*31 + 99
        assert name_hash("abc") == 96354

    def test_wraps_to_signed_32_bit(self) -> None:
        value = name_hash("The quick brown fox jumps over the lazy dog")
        assert -(2**31) <= value < 2**31


class TestTemplates:
    """Tests for template selection."""

    def test_six_templates_in_range(self) -> None:
        assert len(MOCK_TEMPLATES) == 6
        for template in MOCK_TEMPLATES:
            assert -1.0 <= template.sentiment_score <= 1.0
            assert len(template.key_topics) == 3

    def test_index_formula(self) -> None:
        expected = abs(name_hash("AAPL") + hour_bucket(NOW)) % 6
        assert select_template("AAPL", NOW) is MOCK_TEMPLATES[expected]

    def test_hour_bucket(self) -> None:
        assert hour_bucket(datetime(1970, 1, 1, 2, 59, tzinfo=UTC)) == 2


class TestGenerateMockResponse:
    """Tests for generate_mock_response."""

    def test_deterministic_within_hour(self) -> None:
        first = generate_mock_response("AAPL", NOW)
        second = generate_mock_response("AAPL", NOW + timedelta(minutes=20))

        assert first == second

    def test_rotates_across_hours(self) -> None:
        scores = {
            generate_mock_response("AAPL", NOW + timedelta(hours=h)).sentiment_score
            for h in range(6)
        }

        assert len(scores) == 6

    def test_reasoning_prefixed(self) -> None:
        result = generate_mock_response("NVDA", NOW)

        assert result.reasoning.startswith("[MOCK] NVDA: ")

    def test_does_not_share_topic_list(self) -> None:
        result = generate_mock_response("NVDA", NOW)
        result.key_topics.append("mutated")

        assert "mutated" not in select_template("NVDA", NOW).key_topics


class TestMockSentimentScorer:
    """Tests for MockSentimentScorer."""

    @pytest.mark.asyncio
    async def test_uses_clock_and_ignores_context(self) -> None:
        scorer = MockSentimentScorer(clock=lambda: NOW)

        a = await scorer.score("MSFT", "Recent news for MSFT:\n- headline")
        b = await scorer.score("MSFT", "completely different context")

        assert a == b
        assert a == generate_mock_response("MSFT", NOW)

    @pytest.mark.asyncio
    async def test_formatted_score_two_decimals(self) -> None:
        scorer = MockSentimentScorer(clock=lambda: NOW)

        result = await scorer.score("MSFT", "")

        assert result.formatted_score == f"{result.sentiment_score:.2f}"
        assert len(result.formatted_score.split(".")[1]) == 2
