"""Continuous query result data models."""

from dataclasses import dataclass, field
from enum import Enum

from .changes import ChangeBatch, EntitySnapshot


class DiffKind(str, Enum):
    """Row-level change kinds emitted by the query engine."""

    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


@dataclass
class ResultDiff:
    """One row-level change of a query result."""

    kind: DiffKind
    data: EntitySnapshot | None = None
    before: EntitySnapshot | None = None
    after: EntitySnapshot | None = None


@dataclass
class QueryResult:
    """A set of diffs produced by one evaluation of a continuous query."""

    query_id: str
    results: list[ResultDiff] = field(default_factory=list)

    def to_change_batch(self, sequence: int) -> ChangeBatch:
        """Split diffs into added/updated/removed, keeping their order."""
        batch = ChangeBatch(query_id=self.query_id, sequence=sequence)
        for diff in self.results:
            if diff.kind == DiffKind.ADD:
                batch.added.append(diff.data or {})
            elif diff.kind == DiffKind.UPDATE:
                batch.updated.append(diff.after or {})
            elif diff.kind == DiffKind.DELETE:
                batch.removed.append(diff.data or {})
        return batch
