from __future__ import annotations

from fastapi import APIRouter

from backend.core.schema import AgentPayload
from backend.workers.pipeline import get_visualization_pipeline

router = APIRouter(tags=["visualization"])


@router.post("/visualize")
async def visualize(payload: AgentPayload) -> dict:
    """Turn an agent payload into chart datasets.

    Always answers 200; a payload without anything chartable yields a
    result without ``dataset``.
    """
    result = await get_visualization_pipeline().process(payload)
    return result.to_payload()
