"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from mqtt_bridge.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def broker(storage):
    """Create InMemoryBroker with storage."""
    from mqtt_bridge.broker import InMemoryBroker

    return InMemoryBroker(storage)


@pytest.fixture
def tracker(storage):
    """Create Tracker with storage."""
    from mqtt_bridge.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def mock_broker():
    """Create mock broker whose publish always succeeds."""
    mb = Mock()
    mb.subscribe = Mock()
    mb.publish = AsyncMock(return_value=None)
    return mb


@pytest.fixture
def source_settings():
    """Source settings for sensor readings keyed by device_id."""
    from mqtt_bridge.config import OperationPolicy, SourceSettings

    return SourceSettings(
        source_id="test-source",
        topic="sensors/readings",
        node_label="SensorReading",
        id_field="device_id",
        operation_policy=OperationPolicy.FIRST_SEEN,
    )


@pytest.fixture
def reaction_settings():
    """Reaction settings with a dynamic per-device topic."""
    from mqtt_bridge.config import ReactionSettings

    return ReactionSettings(
        reaction_id="test-reaction",
        topic="alerts/{{device_id}}",
        queries=["high-temp-alert"],
    )


@pytest.fixture
def collected_changes():
    """List plus async handler that appends every change event to it."""
    events = []

    async def handler(event):
        events.append(event)

    return events, handler
