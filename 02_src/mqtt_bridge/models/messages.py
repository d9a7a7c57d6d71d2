"""Broker message data models."""

from dataclasses import dataclass
from datetime import datetime

from ..errors import PublishError


@dataclass(frozen=True)
class RawMessage:
    """One inbound broker delivery, consumed once by the inbound mapper."""

    topic: str
    payload: bytes


@dataclass(frozen=True)
class OutboundMessage:
    """A rendered (topic, payload) pair ready to be published."""

    topic: str
    payload: bytes


@dataclass
class PublishResult:
    """Outcome of publishing one OutboundMessage."""

    message: OutboundMessage
    error: PublishError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BrokerRecord:
    """A broker message as persisted by Storage."""

    id: str
    topic: str
    payload: bytes
    timestamp: datetime
