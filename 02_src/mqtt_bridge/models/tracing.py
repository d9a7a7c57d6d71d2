"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event recorded by the Tracker."""

    id: str
    event_type: str  # e.g. "payload_dropped", "message_published"
    actor: str  # component that produced the event
    data: dict
    timestamp: datetime
