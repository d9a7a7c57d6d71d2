"""First-seen tracking for Insert vs Update disambiguation."""

import threading
from collections import OrderedDict
from typing import Protocol


class IFirstSeenTracker(Protocol):
    """Set of entity ids already observed by one subscription."""

    def observe(self, entity_id: str) -> bool:
        """Record entity_id; return True only on its first observation."""
        ...

    def clear(self) -> None:
        """Forget every observed id."""
        ...


class FirstSeenTracker:
    """Unbounded first-seen set. Membership never expires."""

    def __init__(self):
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def observe(self, entity_id: str) -> bool:
        with self._lock:
            if entity_id in self._seen:
                return False
            self._seen.add(entity_id)
            return True

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)


class BoundedFirstSeenTracker:
    """
    LRU-bounded first-seen set.

    Keeps at most `max_entries` ids; the least recently observed id is evicted
    first and is reported as unseen if it shows up again.
    """

    def __init__(self, max_entries: int):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def observe(self, entity_id: str) -> bool:
        with self._lock:
            if entity_id in self._seen:
                self._seen.move_to_end(entity_id)
                return False
            self._seen[entity_id] = None
            if len(self._seen) > self._max_entries:
                self._seen.popitem(last=False)
            return True

    def clear(self) -> None:
        with self._lock:
            self._seen.clear()

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
