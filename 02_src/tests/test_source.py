"""Tests for BrokerSource."""

import pytest

from mqtt_bridge.config import OperationPolicy, SourceSettings
from mqtt_bridge.inbound import BoundedFirstSeenTracker
from mqtt_bridge.models import ChangeOperation
from mqtt_bridge.source import BrokerSource


@pytest.fixture
def source(source_settings, broker, tracker):
    """Create BrokerSource on the shared broker."""
    return BrokerSource(settings=source_settings, broker=broker, tracker=tracker)


class TestBrokerSourceStart:
    """Tests for BrokerSource.start()."""

    async def test_start_subscribes_to_topic(self, source, broker):
        """Test that start subscribes to the configured topic."""
        await source.start()

        assert len(broker._subscribers["sensors/readings"]) == 1
        assert source.running

    async def test_start_twice_subscribes_once(self, source, broker):
        """Test that restarting does not duplicate the subscription."""
        await source.start()
        await source.stop()
        await source.start()

        assert len(broker._subscribers["sensors/readings"]) == 1

    async def test_stopped_source_ignores_messages(
        self, source, broker, collected_changes
    ):
        """Test that deliveries after stop() are ignored."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()
        await source.stop()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert events == []


class TestBrokerSourceMapping:
    """Tests for raw message handling."""

    async def test_message_becomes_change_event(
        self, source, broker, collected_changes
    ):
        """Test the full inbound mapping through the broker."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish(
            "sensors/readings", b'{"device_id": "d1", "temperature": 31.5}'
        )

        assert len(events) == 1
        assert events[0].entity_type == "SensorReading"
        assert events[0].entity_id == "d1"
        assert events[0].operation == ChangeOperation.INSERT
        assert events[0].snapshot["temperature"] == 31.5

    async def test_first_seen_policy(self, source, broker, collected_changes):
        """Test Insert then Update for the same device."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        for payload in (
            b'{"device_id": "d1", "temperature": 20}',
            b'{"device_id": "d1", "temperature": 21}',
            b'{"device_id": "d2", "temperature": 22}',
        ):
            await broker.publish("sensors/readings", payload)

        assert [e.operation for e in events] == [
            ChangeOperation.INSERT,
            ChangeOperation.UPDATE,
            ChangeOperation.INSERT,
        ]

    async def test_events_follow_arrival_order(
        self, source, broker, collected_changes
    ):
        """Test that events are dispatched in message order."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        for i in range(10):
            await broker.publish("sensors/readings", f'{{"device_id": "d{i}"}}'.encode())

        assert [e.entity_id for e in events] == [f"d{i}" for i in range(10)]

    async def test_static_update_policy(self, broker, tracker, collected_changes):
        """Test a source configured for static Update."""
        settings = SourceSettings(
            topic="t", id_field="id", operation_policy=OperationPolicy.UPDATE
        )
        source = BrokerSource(settings=settings, broker=broker, tracker=tracker)
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish("t", b'{"id": "x"}')

        assert events[0].operation == ChangeOperation.UPDATE
        assert events[0].entity_type == "MqttMessage"

    async def test_injected_first_seen_tracker(
        self, source_settings, broker, tracker
    ):
        """Test that an injected tracker is handed to the mapper."""
        first_seen = BoundedFirstSeenTracker(10)
        source = BrokerSource(
            settings=source_settings,
            broker=broker,
            tracker=tracker,
            first_seen=first_seen,
        )
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert "d1" in first_seen

    async def test_reset_forgets_seen_ids(self, source, broker, collected_changes):
        """Test that reset() restarts first-seen tracking."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')
        source.reset()
        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert [e.operation for e in events] == [ChangeOperation.INSERT] * 2


class TestBrokerSourceErrors:
    """Tests for malformed payloads and failing handlers."""

    async def test_malformed_payload_dropped(
        self, source, broker, storage, collected_changes
    ):
        """Test that invalid JSON is dropped and traced."""
        events, handler = collected_changes
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish("sensors/readings", b"not json")
        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert [e.entity_id for e in events] == ["d1"]
        dropped = await storage.get_trace_events(event_types=["payload_dropped"])
        assert len(dropped) == 1
        assert dropped[0].actor == "source:test-source"
        assert dropped[0].data["topic"] == "sensors/readings"

    async def test_failing_handler_does_not_block_others(
        self, source, broker, storage, collected_changes
    ):
        """Test that one failing change handler does not stop the rest."""
        events, handler = collected_changes

        async def failing(event):
            raise RuntimeError("downstream unavailable")

        source.subscribe_changes(failing)
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert len(events) == 1
        failed = await storage.get_trace_events(event_types=["dispatch_failed"])
        assert len(failed) == 1
        assert failed[0].data["entity_id"] == "d1"

    async def test_dispatch_traced(self, source, broker, storage):
        """Test that successful mappings are traced."""
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        traced = await storage.get_trace_events(event_types=["change_dispatched"])
        assert len(traced) == 1
        assert traced[0].data == {
            "operation": "insert",
            "entity_type": "SensorReading",
            "entity_id": "d1",
            "handlers": 0,
        }

    async def test_dispatch_trace_counts_handlers(
        self, source, broker, storage, collected_changes
    ):
        """Test that the trace records how many handlers accepted the change."""
        events, handler = collected_changes

        async def failing(event):
            raise RuntimeError("downstream unavailable")

        source.subscribe_changes(failing)
        source.subscribe_changes(handler)
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        traced = await storage.get_trace_events(event_types=["change_dispatched"])
        assert len(traced) == 1
        assert traced[0].data["handlers"] == 1

    async def test_all_handlers_failing_not_traced_as_dispatched(
        self, source, broker, storage
    ):
        """Test that a change no handler accepted is only traced as failed."""

        async def failing(event):
            raise RuntimeError("downstream unavailable")

        source.subscribe_changes(failing)
        await source.start()

        await broker.publish("sensors/readings", b'{"device_id": "d1"}')

        assert await storage.get_trace_events(event_types=["change_dispatched"]) == []
        failed = await storage.get_trace_events(event_types=["dispatch_failed"])
        assert len(failed) == 1
