"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .broker import InMemoryBroker
from .config import ReactionSettings, SourceSettings, resolve_db_path
from .logging_config import get_logger
from .reaction import BrokerReaction
from .source import BrokerSource
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between test runs."""
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        db_path: str | None = None,
        source_settings: SourceSettings | None = None,
        reaction_settings: ReactionSettings | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._source_settings = source_settings or SourceSettings.from_env()
        self._reaction_settings = reaction_settings or ReactionSettings.from_env()

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._broker: InMemoryBroker | None = None
        self._tracker: ITracker | None = None
        self._source: BrokerSource | None = None
        self._reaction: BrokerReaction | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Broker (depends on Storage for persistence)
        self._broker = InMemoryBroker(self._storage)
        logger.info("Broker initialized")

        # 3. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 4. Source (depends on Broker + Tracker); change events are journaled
        self._source = BrokerSource(
            settings=self._source_settings,
            broker=self._broker,
            tracker=self._tracker,
        )
        self._source.subscribe_changes(self._storage.save_change_event)
        await self._source.start()
        logger.info("Source %s started", self._source.source_id)

        # 5. Reaction (depends on Broker + Tracker)
        self._reaction = BrokerReaction(
            settings=self._reaction_settings,
            broker=self._broker,
            tracker=self._tracker,
        )
        logger.info(
            "Reaction %s ready for queries %s",
            self._reaction.reaction_id,
            self._reaction.query_ids,
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._source:
            await self._source.stop()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset data between test runs."""
        # 1. Pause inbound processing
        if self._source:
            await self._source.stop()

        # 2. Clear storage
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

        # 3. Forget sequences and first-seen history
        if self._reaction:
            self._reaction.reset()
        if self._source:
            self._source.reset()
            await self._source.start()
            logger.info("Reset complete")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def broker(self) -> InMemoryBroker:
        """Get broker instance."""
        if not self._broker:
            raise RuntimeError("Application not started")
        return self._broker

    @property
    def tracker(self) -> ITracker:
        """Get tracker instance."""
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def source(self) -> BrokerSource:
        """Get source instance."""
        if not self._source:
            raise RuntimeError("Application not started")
        return self._source

    @property
    def reaction(self) -> BrokerReaction:
        """Get reaction instance."""
        if not self._reaction:
            raise RuntimeError("Application not started")
        return self._reaction
