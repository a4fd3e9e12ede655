"""LLM sentiment scorer.

Architecture follows PydanticAI conventions:
- Typed deps via `ScorerDeps` dataclass
- Dynamic system prompt injection via `@agent.system_prompt`
- News context passed as the user prompt
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_ai import Agent, RunContext

from narrative.core.exceptions import LLMError
from narrative.core.logging import get_logger
from narrative.processing.common.llm import create_model
from narrative.processing.sentiment.models import SentimentAnalysis
from narrative.processing.sentiment.prompts import create_analyst_prompt

logger = get_logger(__name__)


@dataclass
class ScorerDeps:
    """Dependencies for one scoring run."""

    asset_name: str


def create_scorer_agent() -> Agent[ScorerDeps, SentimentAnalysis]:
    """Create the PydanticAI agent for sentiment scoring (no tools)."""
    agent: Agent[ScorerDeps, SentimentAnalysis] = Agent(
        create_model(),
        deps_type=ScorerDeps,
        output_type=SentimentAnalysis,
    )

    @agent.system_prompt
    def analyst_persona(ctx: RunContext[ScorerDeps]) -> str:
        return create_analyst_prompt(ctx.deps.asset_name)

    return agent


class LLMSentimentScorer:
    """Scores news context with the configured LLM."""

    def __init__(self, agent: Agent[ScorerDeps, SentimentAnalysis] | None = None) -> None:
        self._agent = agent

    @property
    def agent(self) -> Agent[ScorerDeps, SentimentAnalysis]:
        """Get or create the scorer agent."""
        if self._agent is None:
            self._agent = create_scorer_agent()
        return self._agent

    async def score(self, asset_name: str, context: str) -> SentimentAnalysis:
        """Score an asset from its news context.

        Raises:
            LLMError: If the provider call or output validation fails
        """
        try:
            result = await self.agent.run(context, deps=ScorerDeps(asset_name=asset_name))
        except Exception as e:
            raise LLMError(f"Sentiment scoring failed for {asset_name}: {e}") from e

        analysis = result.output
        logger.debug(
            "Sentiment scored",
            asset=asset_name,
            score=analysis.sentiment_score,
            key_topics=analysis.key_topics,
        )
        return analysis
