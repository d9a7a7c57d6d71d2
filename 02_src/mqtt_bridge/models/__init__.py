"""Core data models for the MQTT bridge."""

from .changes import ChangeBatch, ChangeEvent, ChangeOperation, EntitySnapshot
from .messages import BrokerRecord, OutboundMessage, PublishResult, RawMessage
from .queries import DiffKind, QueryResult, ResultDiff
from .tracing import TraceEvent

__all__ = [
    # Broker messages
    "RawMessage",
    "OutboundMessage",
    "PublishResult",
    "BrokerRecord",
    # Graph changes
    "ChangeOperation",
    "ChangeEvent",
    "ChangeBatch",
    "EntitySnapshot",
    # Query results
    "DiffKind",
    "ResultDiff",
    "QueryResult",
    # Tracing
    "TraceEvent",
]
