"""Tests for first-seen trackers."""

import threading

import pytest

from mqtt_bridge.inbound import BoundedFirstSeenTracker, FirstSeenTracker


class TestFirstSeenTracker:
    """Tests for the unbounded tracker."""

    def test_first_observation_is_new(self):
        """Test that the first observe() returns True."""
        tracker = FirstSeenTracker()
        assert tracker.observe("a") is True

    def test_repeat_observation_is_not_new(self):
        """Test that later observe() calls return False."""
        tracker = FirstSeenTracker()
        tracker.observe("a")
        assert tracker.observe("a") is False
        assert tracker.observe("a") is False

    def test_ids_are_independent(self):
        """Test that different ids are tracked separately."""
        tracker = FirstSeenTracker()
        assert tracker.observe("a") is True
        assert tracker.observe("b") is True
        assert len(tracker) == 2
        assert "a" in tracker
        assert "c" not in tracker

    def test_clear(self):
        """Test that clear() forgets every id."""
        tracker = FirstSeenTracker()
        tracker.observe("a")
        tracker.clear()
        assert len(tracker) == 0
        assert tracker.observe("a") is True

    def test_concurrent_observe_reports_new_once(self):
        """Test that racing threads see exactly one first observation."""
        tracker = FirstSeenTracker()
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(tracker.observe("shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert results.count(False) == 7


class TestBoundedFirstSeenTracker:
    """Tests for the LRU-bounded tracker."""

    def test_invalid_capacity(self):
        """Test that capacity must be positive."""
        with pytest.raises(ValueError):
            BoundedFirstSeenTracker(0)

    def test_within_capacity_behaves_like_set(self):
        """Test first/repeat semantics below capacity."""
        tracker = BoundedFirstSeenTracker(10)
        assert tracker.observe("a") is True
        assert tracker.observe("a") is False

    def test_evicts_least_recent(self):
        """Test that the oldest id is evicted past capacity."""
        tracker = BoundedFirstSeenTracker(2)
        tracker.observe("a")
        tracker.observe("b")
        tracker.observe("c")  # evicts "a"

        assert len(tracker) == 2
        assert "a" not in tracker
        assert tracker.observe("a") is True

    def test_repeat_refreshes_recency(self):
        """Test that re-observing an id protects it from eviction."""
        tracker = BoundedFirstSeenTracker(2)
        tracker.observe("a")
        tracker.observe("b")
        tracker.observe("a")  # "b" is now least recent
        tracker.observe("c")  # evicts "b"

        assert "a" in tracker
        assert "b" not in tracker
