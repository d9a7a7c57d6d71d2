"""Messaging API routes."""

import json
from typing import Any

from pydantic import BaseModel, Field
from fastapi import APIRouter, HTTPException

from ...app import Application
from ...errors import PublishError
from ...models import DiffKind, QueryResult, ResultDiff


class InboundMessageRequest(BaseModel):
    """Request model for injecting a broker delivery."""

    topic: str
    # Strings are sent as-is so malformed payloads can be exercised
    payload: Any


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class ResultDiffRequest(BaseModel):
    """One row-level change of a query result."""

    type: DiffKind
    data: dict[str, Any] | None = None
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None


class QueryResultRequest(BaseModel):
    """Request model for handing a query result to the reaction."""

    query_id: str
    results: list[ResultDiffRequest] = Field(default_factory=list)


class QueryResultResponse(BaseModel):
    """Response model for a processed query result."""

    query_id: str
    sequence: int
    published: int
    failed: int


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    @router.post("/messages", response_model=StatusResponse)
    async def publish_message(request: InboundMessageRequest) -> dict:
        """Publish a message on the broker as if it came from a device."""
        if isinstance(request.payload, str):
            payload = request.payload.encode("utf-8")
        else:
            payload = json.dumps(request.payload).encode("utf-8")

        try:
            await app.broker.publish(request.topic, payload)
        except PublishError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"status": "ok"}

    @router.post("/query-results", response_model=QueryResultResponse)
    async def process_query_result(request: QueryResultRequest) -> dict:
        """Render and publish a continuous query result."""
        result = QueryResult(
            query_id=request.query_id,
            results=[
                ResultDiff(kind=d.type, data=d.data, before=d.before, after=d.after)
                for d in request.results
            ],
        )
        try:
            outcomes = await app.reaction.process(result)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        failed = sum(1 for o in outcomes if not o.ok)
        return {
            "query_id": request.query_id,
            "sequence": app.reaction.last_sequence(request.query_id),
            "published": len(outcomes) - failed,
            "failed": failed,
        }

    return router
