"""Broker source: raw broker messages in, graph change events out."""

import asyncio
from typing import Awaitable, Callable, Protocol

from ..broker import IBrokerClient
from ..config import SourceSettings
from ..errors import ParseError
from ..inbound import IFirstSeenTracker, InboundMapper
from ..logging_config import get_logger
from ..models import ChangeEvent, RawMessage
from ..tracker import ITracker

logger = get_logger(__name__)


ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]


class ISource(Protocol):
    """Feeds change events from a broker topic to the graph pipeline."""

    async def start(self) -> None:
        """Subscribe to the configured broker topic."""
        ...

    async def stop(self) -> None:
        """Stop dispatching change events."""
        ...

    def subscribe_changes(self, handler: ChangeHandler) -> None:
        """Register a downstream change handler."""
        ...


class BrokerSource:
    """
    Maps every message on one broker topic to a ChangeEvent.

    Messages are handled one at a time in arrival order, so downstream
    handlers see change events in the order their source messages arrived.
    Malformed payloads are logged and dropped.
    """

    def __init__(
        self,
        settings: SourceSettings,
        broker: IBrokerClient,
        tracker: ITracker,
        first_seen: IFirstSeenTracker | None = None,
    ):
        self._settings = settings
        self._broker = broker
        self._tracker = tracker
        self._mapper = InboundMapper(
            id_field=settings.id_field,
            entity_type=settings.node_label,
            policy=settings.operation_policy,
            tracker=first_seen,
        )
        self._handlers: list[ChangeHandler] = []
        self._lock = asyncio.Lock()
        self._running = False
        self._subscribed = False

    @property
    def source_id(self) -> str:
        return self._settings.source_id

    @property
    def mapper(self) -> InboundMapper:
        return self._mapper

    @property
    def running(self) -> bool:
        return self._running

    def subscribe_changes(self, handler: ChangeHandler) -> None:
        """Register a downstream change handler."""
        self._handlers.append(handler)

    async def start(self) -> None:
        """Subscribe to the configured broker topic."""
        if self._running:
            return
        if not self._subscribed:
            self._broker.subscribe(self._settings.topic, self._handle_raw)
            self._subscribed = True
        self._running = True
        logger.info(
            "[%s] Source started (topic=%s, label=%s, id_field=%s, mode=%s)",
            self.source_id,
            self._settings.topic,
            self._settings.node_label,
            self._settings.id_field,
            self._mapper.policy.value,
        )

    async def stop(self) -> None:
        """Stop dispatching; later deliveries are ignored."""
        self._running = False
        logger.info("[%s] Source stopped", self.source_id)

    def reset(self) -> None:
        """Forget first-seen history."""
        self._mapper.reset()

    async def _handle_raw(self, message: RawMessage) -> None:
        """Handle one inbound broker delivery."""
        if not self._running:
            return

        async with self._lock:
            try:
                event = self._mapper.map(message)
            except ParseError as e:
                logger.warning(
                    "[%s] %s",
                    self.source_id,
                    e,
                    extra={"context": e.context},
                )
                await self._tracker.track(
                    "payload_dropped",
                    f"source:{self.source_id}",
                    {"topic": message.topic, "reason": e.reason},
                )
                return

            await self._dispatch(event)

    async def _dispatch(self, event: ChangeEvent) -> None:
        delivered = 0
        for handler in self._handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "[%s] Failed to dispatch change %s:%s: %s",
                    self.source_id,
                    event.entity_type,
                    event.entity_id,
                    e,
                    extra={
                        "entity_type": event.entity_type,
                        "entity_id": event.entity_id,
                    },
                )
                await self._tracker.track(
                    "dispatch_failed",
                    f"source:{self.source_id}",
                    {"entity_id": event.entity_id, "error": str(e)},
                )
            else:
                delivered += 1

        # Every handler failed; dispatch_failed already recorded it
        if delivered == 0 and self._handlers:
            return

        await self._tracker.track(
            "change_dispatched",
            f"source:{self.source_id}",
            {
                "operation": event.operation.value,
                "entity_type": event.entity_type,
                "entity_id": event.entity_id,
                "handlers": delivered,
            },
        )
