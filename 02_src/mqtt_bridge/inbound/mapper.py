"""Mapping of raw broker payloads to graph change events."""

import json
from typing import Any, Mapping

from ..config import OperationPolicy
from ..errors import ParseError
from ..logging_config import get_logger
from ..models import ChangeEvent, ChangeOperation, RawMessage
from .first_seen import FirstSeenTracker, IFirstSeenTracker
from .identity import resolve_entity_id

logger = get_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_payload(raw: RawMessage) -> Any:
    """Decode the payload bytes as JSON, raising ParseError on failure."""
    try:
        # Strict UTF-8: json.loads would otherwise sniff UTF-16/32 and BOMs
        return json.loads(raw.payload.decode("utf-8"), parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ParseError(raw.topic, str(e), cause=e) from e


def map_payload(
    raw: RawMessage,
    id_field: str,
    entity_type: str,
    mode: ChangeOperation,
) -> ChangeEvent:
    """
    Convert one raw broker payload into one change event.

    Args:
        raw: Inbound broker delivery.
        id_field: Payload field holding the entity identifier.
        entity_type: Graph node label for the entity.
        mode: Operation to emit (Insert or Update).

    Raises:
        ParseError: The payload is not valid JSON.
    """
    document = parse_payload(raw)
    entity_id = resolve_entity_id(document, id_field)
    return _build_event(document, entity_id, entity_type, mode)


def _build_event(
    document: Any,
    entity_id: str,
    entity_type: str,
    mode: ChangeOperation,
) -> ChangeEvent:
    snapshot = dict(document) if isinstance(document, Mapping) else {}
    return ChangeEvent(
        operation=mode,
        entity_type=entity_type,
        entity_id=entity_id,
        snapshot=snapshot,
    )


class InboundMapper:
    """
    Maps raw messages for one subscription under a single operation policy.

    Static policies always emit the same operation. The first-seen policy
    emits Insert for the first observation of an entity id and Update after
    that, using an injectable tracker.
    """

    def __init__(
        self,
        id_field: str,
        entity_type: str,
        policy: OperationPolicy = OperationPolicy.INSERT,
        tracker: IFirstSeenTracker | None = None,
    ):
        self._id_field = id_field
        self._entity_type = entity_type
        self._policy = OperationPolicy(policy)
        if self._policy == OperationPolicy.FIRST_SEEN and tracker is None:
            tracker = FirstSeenTracker()
        self._tracker = tracker

    @property
    def policy(self) -> OperationPolicy:
        return self._policy

    @property
    def tracker(self) -> IFirstSeenTracker | None:
        return self._tracker

    def map(self, raw: RawMessage) -> ChangeEvent:
        """Map one raw message, raising ParseError if it is malformed."""
        document = parse_payload(raw)
        entity_id = resolve_entity_id(document, self._id_field)
        mode = self._select_mode(entity_id)

        logger.debug(
            "Mapped payload on %s to %s %s:%s",
            raw.topic,
            mode.value,
            self._entity_type,
            entity_id,
        )
        return _build_event(document, entity_id, self._entity_type, mode)

    def reset(self) -> None:
        """Forget first-seen history (no-op for static policies)."""
        if self._tracker is not None:
            self._tracker.clear()

    def _select_mode(self, entity_id: str) -> ChangeOperation:
        if self._policy == OperationPolicy.INSERT:
            return ChangeOperation.INSERT
        if self._policy == OperationPolicy.UPDATE:
            return ChangeOperation.UPDATE
        if self._tracker.observe(entity_id):
            return ChangeOperation.INSERT
        return ChangeOperation.UPDATE
