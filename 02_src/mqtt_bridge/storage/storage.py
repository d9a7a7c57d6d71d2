"""SQLite storage implementation."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import BrokerRecord, ChangeEvent, ChangeOperation, TraceEvent


class IStorage(Protocol):
    """Persistent storage for bridge activity (SQLite)."""

    async def init(self) -> None:
        """Initialize database and create tables."""
        ...

    async def close(self) -> None:
        """Close database connection."""
        ...

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters."""
        ...

    # ChangeEvents
    async def save_change_event(self, event: ChangeEvent) -> None:
        """Save a change event emitted by the inbound side."""
        ...

    async def get_change_events(
        self,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int = 100,
    ) -> list[ChangeEvent]:
        """Get change events in arrival order."""
        ...

    # Broker messages
    async def save_broker_message(self, topic: str, payload: bytes) -> None:
        """Save a message that went through the broker."""
        ...

    async def get_broker_messages(
        self, topic: str | None = None, limit: int = 100
    ) -> list[BrokerRecord]:
        """Get broker messages in publish order."""
        ...

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        ...


class Storage:
    """SQLite storage implementation."""

    def __init__(self, db_path: str | Path | None = None):
        if db_path is None:
            self._db_path = resolve_db_path()
        else:
            self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Initialize database and create tables."""
        self._conn = await aiosqlite.connect(self._db_path)

        schema_path = Path(__file__).parent / "schema.sql"
        with open(schema_path, "r", encoding="utf-8") as f:
            schema_sql = f.read()
        await self._conn.executescript(schema_sql)
        await self._conn.commit()

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    # TraceEvents
    async def save_trace_event(self, event: TraceEvent) -> None:
        """Save a trace event."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT INTO trace_events (id, event_type, actor, data, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                event.id or str(uuid.uuid4()),
                event.event_type,
                event.actor,
                json.dumps(event.data),
                event.timestamp.isoformat(),
            ),
        )
        await self._conn.commit()

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters (newest first)."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        conditions = []
        params = []

        if after:
            conditions.append("timestamp > ?")
            params.append(after.isoformat())
        if event_types:
            placeholders = ",".join("?" * len(event_types))
            conditions.append(f"event_type IN ({placeholders})")
            params.extend(event_types)
        if actor:
            conditions.append("actor = ?")
            params.append(actor)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT id, event_type, actor, data, timestamp
            FROM trace_events
            {where_clause}
            ORDER BY timestamp DESC
            LIMIT ?
        """
        params.append(limit)

        cursor = await self._conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            TraceEvent(
                id=row[0],
                event_type=row[1],
                actor=row[2],
                data=json.loads(row[3]),
                timestamp=_parse_timestamp(row[4]),
            )
            for row in rows
        ]

    # ChangeEvents
    async def save_change_event(self, event: ChangeEvent) -> None:
        """Save a change event emitted by the inbound side."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT INTO change_events
                (operation, entity_type, entity_id, snapshot, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                event.operation.value,
                event.entity_type,
                event.entity_id,
                json.dumps(dict(event.snapshot)),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        await self._conn.commit()

    async def get_change_events(
        self,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int = 100,
    ) -> list[ChangeEvent]:
        """Get change events in arrival order."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        conditions = []
        params = []

        if entity_type:
            conditions.append("entity_type = ?")
            params.append(entity_type)
        if entity_id:
            conditions.append("entity_id = ?")
            params.append(entity_id)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        query = f"""
            SELECT operation, entity_type, entity_id, snapshot
            FROM change_events
            {where_clause}
            ORDER BY seq ASC
            LIMIT ?
        """
        params.append(limit)

        cursor = await self._conn.execute(query, params)
        rows = await cursor.fetchall()

        return [
            ChangeEvent(
                operation=ChangeOperation(row[0]),
                entity_type=row[1],
                entity_id=row[2],
                snapshot=json.loads(row[3]),
            )
            for row in rows
        ]

    # Broker messages
    async def save_broker_message(self, topic: str, payload: bytes) -> None:
        """Save a message that went through the broker."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        await self._conn.execute(
            """
            INSERT INTO broker_messages (id, topic, payload, timestamp)
            VALUES (?, ?, ?, ?)
            """,
            (
                str(uuid.uuid4()),
                topic,
                payload,
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        await self._conn.commit()

    async def get_broker_messages(
        self, topic: str | None = None, limit: int = 100
    ) -> list[BrokerRecord]:
        """Get broker messages in publish order."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        if topic:
            cursor = await self._conn.execute(
                """
                SELECT id, topic, payload, timestamp
                FROM broker_messages
                WHERE topic = ?
                ORDER BY seq ASC
                LIMIT ?
                """,
                (topic, limit),
            )
        else:
            cursor = await self._conn.execute(
                """
                SELECT id, topic, payload, timestamp
                FROM broker_messages
                ORDER BY seq ASC
                LIMIT ?
                """,
                (limit,),
            )
        rows = await cursor.fetchall()

        return [
            BrokerRecord(
                id=row[0],
                topic=row[1],
                payload=bytes(row[2]),
                timestamp=_parse_timestamp(row[3]),
            )
            for row in rows
        ]

    # Lifecycle
    async def clear(self) -> None:
        """Clear all data."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        tables = [
            "trace_events",
            "change_events",
            "broker_messages",
        ]

        for table in tables:
            await self._conn.execute(f"DELETE FROM {table}")

        await self._conn.commit()


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)
