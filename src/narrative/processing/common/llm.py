"""PydanticAI model selection for the sentiment scorer.

Provider is chosen by `LLM_PROVIDER`:
- openai: OpenAI, or any OpenAI-compatible endpoint when `OPENAI_BASE_URL` is set
- anthropic: Claude models
"""

from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.openai import OpenAIProvider

from narrative.config import Settings, get_settings
from narrative.core.exceptions import ConfigurationError
from narrative.core.logging import get_logger

logger = get_logger(__name__)


def _anthropic_model(settings: Settings) -> Model:
    if settings.anthropic_api_key is None:
        raise ConfigurationError("ANTHROPIC_API_KEY is required when LLM_PROVIDER=anthropic")
    provider = AnthropicProvider(api_key=settings.anthropic_api_key.get_secret_value())
    return AnthropicModel(settings.llm_model, provider=provider)


def _openai_model(settings: Settings) -> Model:
    if settings.openai_api_key is None and not settings.openai_base_url:
        raise ConfigurationError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
    api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
    provider = OpenAIProvider(base_url=settings.openai_base_url, api_key=api_key)
    return OpenAIChatModel(settings.llm_model, provider=provider)


def create_model(settings: Settings | None = None) -> Model:
    """Build the configured PydanticAI model.

    Raises:
        ConfigurationError: If the provider's API key is missing
    """
    settings = settings or get_settings()
    if settings.llm_provider == "anthropic":
        model = _anthropic_model(settings)
    else:
        model = _openai_model(settings)

    logger.debug(
        "LLM model created",
        provider=settings.llm_provider,
        model=settings.llm_model,
        base_url=settings.openai_base_url,
    )
    return model
