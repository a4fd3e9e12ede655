"""Administrative endpoints: scoring mock flag and queue monitoring."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from narrative.core.dependencies import FlagsDep, QueueDep, verify_admin_token
from narrative.pipeline.flags import MockSettings
from narrative.pipeline.models import QueueStats

router = APIRouter(dependencies=[Depends(verify_admin_token)])


class MockToggleRequest(BaseModel):
    enabled: bool = Field(..., description="Use the deterministic mock scorer")


@router.get("/mock-settings", response_model=MockSettings)
async def get_mock_settings(flags: FlagsDep) -> MockSettings:
    return await flags.get()


@router.put("/mock-settings", response_model=MockSettings)
async def update_mock_settings(body: MockToggleRequest, flags: FlagsDep) -> MockSettings:
    return await flags.toggle_scoring_mock(body.enabled)


@router.get("/queue", response_model=QueueStats)
async def queue_stats(queue: QueueDep) -> QueueStats:
    """Pending and in-flight ticker counts."""
    return await queue.get_stats()
