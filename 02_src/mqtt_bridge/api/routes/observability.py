"""Observability API routes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from fastapi import APIRouter, HTTPException, Query

from ...app import Application


class TraceEventResponse(BaseModel):
    """Response model for trace event."""

    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


class ChangeEventResponse(BaseModel):
    """Response model for change event."""

    operation: str
    entity_type: str
    entity_id: str
    snapshot: dict[str, Any]


class BrokerMessageResponse(BaseModel):
    """Response model for a persisted broker message."""

    id: str
    topic: str
    payload: str
    timestamp: datetime


def create_observability_router(app: Application) -> APIRouter:
    """Create observability router."""
    router = APIRouter(prefix="/api", tags=["observability"])

    @router.get("/trace-events", response_model=list[TraceEventResponse])
    async def get_trace_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
        actor: str | None = Query(None, description="Filter by actor"),
    ) -> list[dict]:
        """Get trace events with optional filters."""
        after_dt = None
        if after:
            try:
                after_dt = datetime.fromisoformat(after)
            except ValueError:
                raise HTTPException(
                    status_code=400, detail="Invalid after timestamp format"
                )

        event_types = [event_type] if event_type else None

        events = await app.storage.get_trace_events(
            after=after_dt,
            event_types=event_types,
            actor=actor,
            limit=limit,
        )

        return [
            {
                "id": e.id,
                "event_type": e.event_type,
                "actor": e.actor,
                "data": e.data,
                "timestamp": e.timestamp.isoformat(),
            }
            for e in events
        ]

    @router.get("/change-events", response_model=list[ChangeEventResponse])
    async def get_change_events(
        entity_type: str | None = Query(None, description="Filter by node label"),
        entity_id: str | None = Query(None, description="Filter by entity id"),
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[dict]:
        """Get change events emitted by the source, in arrival order."""
        events = await app.storage.get_change_events(
            entity_type=entity_type, entity_id=entity_id, limit=limit
        )
        return [e.to_dict() for e in events]

    @router.get("/broker-messages", response_model=list[BrokerMessageResponse])
    async def get_broker_messages(
        topic: str | None = Query(None, description="Filter by exact topic"),
        limit: int = Query(100, ge=1, le=1000),
    ) -> list[dict]:
        """Get messages that went through the broker, in publish order."""
        records = await app.storage.get_broker_messages(topic=topic, limit=limit)
        return [
            {
                "id": r.id,
                "topic": r.topic,
                "payload": r.payload.decode("utf-8", errors="replace"),
                "timestamp": r.timestamp.isoformat(),
            }
            for r in records
        ]

    return router
