"""Graph change data models."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

EntitySnapshot = Mapping[str, Any]


class ChangeOperation(str, Enum):
    """Kind of graph mutation. Values double as the `op` template key."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ChangeEvent:
    """A single Insert/Update/Delete for one entity, from one inbound message."""

    operation: ChangeOperation
    entity_type: str
    entity_id: str
    snapshot: EntitySnapshot = field(default_factory=dict)

    def __post_init__(self):
        if not self.entity_id:
            raise ValueError("entity_id must be non-empty")
        # Freeze the snapshot; callers keep no handle to mutate it
        object.__setattr__(
            self, "snapshot", MappingProxyType(dict(self.snapshot))
        )

    def to_dict(self) -> dict:
        return {
            "operation": self.operation.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "snapshot": dict(self.snapshot),
        }


@dataclass
class ChangeBatch:
    """Sequence-numbered added/updated/removed snapshots for one query."""

    query_id: str
    sequence: int
    added: list[EntitySnapshot] = field(default_factory=list)
    updated: list[EntitySnapshot] = field(default_factory=list)
    removed: list[EntitySnapshot] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.updated or self.removed)
