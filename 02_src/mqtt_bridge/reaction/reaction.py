"""Broker reaction: query results in, broker messages out."""

from collections import defaultdict
from typing import Protocol

from ..broker import IBrokerClient
from ..config import ReactionSettings
from ..errors import PublishError, RenderError
from ..logging_config import get_logger
from ..models import OutboundMessage, PublishResult, QueryResult
from ..outbound import OutboundRenderer
from ..tracker import ITracker

logger = get_logger(__name__)


class IReaction(Protocol):
    """Publishes continuous query results to the broker."""

    @property
    def query_ids(self) -> list[str]:
        """Queries this reaction subscribes to."""
        ...

    async def process(self, result: QueryResult) -> list[PublishResult]:
        """Render and publish one query result."""
        ...


class BrokerReaction:
    """
    Renders query results with the configured templates and publishes them.

    Each subscribed query gets its own sequence counter starting at 1.
    A failed publish is recorded for that message only; the remaining
    messages of the same result are still published.
    """

    def __init__(
        self,
        settings: ReactionSettings,
        broker: IBrokerClient,
        tracker: ITracker,
    ):
        self._settings = settings
        self._broker = broker
        self._tracker = tracker
        self._renderer = OutboundRenderer(settings.topic, settings.payload_template)
        self._sequences: defaultdict[str, int] = defaultdict(int)

    @property
    def reaction_id(self) -> str:
        return self._settings.reaction_id

    @property
    def query_ids(self) -> list[str]:
        return list(self._settings.queries)

    @property
    def renderer(self) -> OutboundRenderer:
        return self._renderer

    def last_sequence(self, query_id: str) -> int:
        """Sequence of the last batch rendered for query_id (0 if none)."""
        return self._sequences.get(query_id, 0)

    def reset(self) -> None:
        """Restart every query's sequence at 1."""
        self._sequences.clear()

    async def process(self, result: QueryResult) -> list[PublishResult]:
        """Render one query result and publish the messages in order."""
        actor = f"reaction:{self.reaction_id}"
        if result.query_id not in self._settings.queries:
            logger.debug(
                "[%s] Ignoring result for unsubscribed query %s",
                self.reaction_id,
                result.query_id,
            )
            return []

        self._sequences[result.query_id] += 1
        batch = result.to_change_batch(self._sequences[result.query_id])

        try:
            messages = self._renderer.render(batch)
        except RenderError as e:
            logger.error(
                "[%s] Failed to process result: %s",
                self.reaction_id,
                e,
                extra={
                    "context": e.context,
                    "query_id": batch.query_id,
                    "sequence": batch.sequence,
                },
            )
            await self._tracker.track(
                "render_failed",
                actor,
                {
                    "query_id": batch.query_id,
                    "sequence": batch.sequence,
                    "error": str(e),
                },
            )
            return []

        results: list[PublishResult] = []
        for message in messages:
            error = await self._publish(message)
            results.append(PublishResult(message=message, error=error))

            if error is None:
                await self._tracker.track(
                    "message_published",
                    actor,
                    {"topic": message.topic, "sequence": batch.sequence},
                )
                continue

            logger.error(
                "[%s] Failed to publish to %s: %s",
                self.reaction_id,
                message.topic,
                error,
                extra={"topic": message.topic, "sequence": batch.sequence},
            )
            await self._tracker.track(
                "publish_failed",
                actor,
                {"topic": message.topic, "error": str(error)},
            )

        logger.info(
            "[%s] Published %s/%s messages for %s#%s",
            self.reaction_id,
            sum(1 for r in results if r.ok),
            len(results),
            batch.query_id,
            batch.sequence,
        )
        return results

    async def _publish(self, message: OutboundMessage) -> PublishError | None:
        try:
            await self._broker.publish(message.topic, message.payload)
        except PublishError as e:
            return e
        except Exception as e:
            return PublishError(message.topic, cause=e)
        return None
