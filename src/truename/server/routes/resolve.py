"""Name resolution routes."""

from typing import Any

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

router = APIRouter()


class BatchRequest(BaseModel):
    """Context names to resolve for one target."""

    contexts: list[str] = Field(min_length=1, max_length=50)


@router.get("/{target_id}")
async def resolve_name(
    request: Request,
    target_id: str,
    requester_id: str | None = None,
    context: str | None = Query(default=None, max_length=100),
) -> dict[str, Any]:
    """Resolve the name to disclose for a target.

    Always answers 200: store failures degrade to a fallback resolution.
    """
    engine = request.app.state.engine
    resolution = await engine.resolve(target_id, requester_id, context)
    return resolution.to_dict()


@router.post("/{target_id}/batch")
async def resolve_batch(
    request: Request, target_id: str, body: BatchRequest
) -> dict[str, Any]:
    """Resolve one name per context for a target, in request order."""
    engine = request.app.state.engine
    results = await engine.resolve_batch(target_id, body.contexts)
    return {"results": [r.to_dict() for r in results]}
