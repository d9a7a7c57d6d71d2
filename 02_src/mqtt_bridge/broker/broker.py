"""Broker capability and in-process broker implementation."""

import asyncio
from typing import Awaitable, Callable, Protocol

from ..errors import PublishError
from ..logging_config import get_logger
from ..models import RawMessage
from ..storage import IStorage

logger = get_logger(__name__)


MessageHandler = Callable[[RawMessage], Awaitable[None]]


class IBrokerClient(Protocol):
    """Narrow publish/subscribe capability the bridge needs from a broker."""

    def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Deliver every message published on topic to handler."""
        ...

    async def publish(self, topic: str, payload: bytes) -> None:
        """Publish payload on topic. Raises PublishError on failure."""
        ...


class InMemoryBroker:
    """
    In-process pub/sub broker with exact topic matching.

    Published messages are persisted to Storage and then handed to each
    subscriber of the topic. A failing subscriber is logged and does not
    affect the others or the publisher.
    """

    def __init__(self, storage: IStorage):
        self._storage = storage
        self._subscribers: dict[str, list[MessageHandler]] = {}

    def subscribe(self, topic: str, handler: MessageHandler) -> None:
        """Subscribe a handler to a topic."""
        self._subscribers.setdefault(topic, []).append(handler)

    def unsubscribe(self, topic: str, handler: MessageHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, payload: bytes) -> None:
        """Persist the message, then deliver it to topic subscribers."""
        try:
            await self._storage.save_broker_message(topic, payload)
        except Exception as e:
            raise PublishError(topic, cause=e) from e

        handlers = list(self._subscribers.get(topic, []))
        if not handlers:
            return

        message = RawMessage(topic=topic, payload=payload)
        results = await asyncio.gather(
            *[handler(message) for handler in handlers],
            return_exceptions=True,
        )

        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error("Error in handler %s for %s: %s", i, topic, result)
