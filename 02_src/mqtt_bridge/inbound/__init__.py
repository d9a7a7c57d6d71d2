"""Inbound module: broker payloads to graph change events."""

from .first_seen import BoundedFirstSeenTracker, FirstSeenTracker, IFirstSeenTracker
from .identity import resolve_entity_id
from .mapper import InboundMapper, map_payload, parse_payload

__all__ = [
    "BoundedFirstSeenTracker",
    "FirstSeenTracker",
    "IFirstSeenTracker",
    "InboundMapper",
    "map_payload",
    "parse_payload",
    "resolve_entity_id",
]
