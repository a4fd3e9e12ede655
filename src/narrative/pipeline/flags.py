"""Process-wide mock settings stored in Redis.

The record lives at `narrative:mock_settings` with no TTL and is written only
by administrative actions. Callers read it through `MockSettingsStore` at the
start of each unit of work; nothing here caches it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from narrative.core.constants import MOCK_SETTINGS_KEY
from narrative.core.logging import get_logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


class MockSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    llm_mock_enabled: bool = Field(default=False, alias="llmMockEnabled")


class MockSettingsStore:
    """Read/write access to the mock settings record."""

    def __init__(self, redis: Redis, key: str = MOCK_SETTINGS_KEY) -> None:
        self.redis = redis
        self.key = key

    async def get(self) -> MockSettings:
        """Get current settings, falling back to defaults when unset."""
        raw = await self.redis.get(self.key)
        if not raw:
            return MockSettings()
        try:
            return MockSettings.model_validate(orjson.loads(raw))
        except (orjson.JSONDecodeError, ValidationError) as e:
            logger.warning("Invalid mock settings record, using defaults", error=str(e))
            return MockSettings()

    async def set(self, **changes: Any) -> MockSettings:
        """Merge changes into the current settings and persist them.

        Args:
            **changes: Field names to update (e.g. llm_mock_enabled=True)

        Returns:
            The updated settings
        """
        current = await self.get()
        updated = MockSettings.model_validate({**current.model_dump(), **changes})
        await self.redis.set(self.key, orjson.dumps(updated.model_dump(by_alias=True)))
        logger.info("Mock settings updated", llm_mock_enabled=updated.llm_mock_enabled)
        return updated

    async def is_scoring_mocked(self) -> bool:
        settings = await self.get()
        return settings.llm_mock_enabled

    async def toggle_scoring_mock(self, enabled: bool) -> MockSettings:
        return await self.set(llm_mock_enabled=enabled)
