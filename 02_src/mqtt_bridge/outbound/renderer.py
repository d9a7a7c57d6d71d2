"""Rendering of query change batches into broker messages."""

import json
from typing import Any

from ..errors import RenderError
from ..models import (
    ChangeBatch,
    ChangeOperation,
    EntitySnapshot,
    OutboundMessage,
)
from ..templates import has_placeholders, render_template


def encode_json(value: Any) -> bytes:
    """Compact UTF-8 JSON encoding used for every default payload."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def _encode(value: Any, what: str) -> bytes:
    """Strings as raw UTF-8, anything else as compact JSON."""
    try:
        if isinstance(value, str):
            return value.encode("utf-8")
        return encode_json(value)
    except UnicodeEncodeError as e:
        # Lone surrogates survive json.loads but have no UTF-8 form
        raise RenderError(f"Rendered {what} is not valid UTF-8: {e.reason}") from e


def build_render_context(
    entity: EntitySnapshot,
    query_id: str,
    sequence: int,
    op: ChangeOperation,
) -> dict[str, Any]:
    """Entity fields plus injected query_id/sequence/op (injected keys win)."""
    context = dict(entity)
    context["query_id"] = query_id
    context["sequence"] = sequence
    context["op"] = op.value
    return context


def is_split_mode(topic_template: str, payload_template: str | None) -> bool:
    """Per-entity fan-out when the topic is dynamic or a payload template is set."""
    return has_placeholders(topic_template) or payload_template is not None


def render_batch(
    batch: ChangeBatch,
    topic_template: str,
    payload_template: str | None = None,
) -> list[OutboundMessage]:
    """
    Convert one change batch into an ordered list of outbound messages.

    Split mode yields one message per entity in added, updated, removed order.
    Batch mode yields a single message carrying the whole batch as JSON.

    Raises:
        RenderError: Any entity fails to render; no partial list is returned.
    """
    if not is_split_mode(topic_template, payload_template):
        payload = {
            "query_id": batch.query_id,
            "sequence": batch.sequence,
            "added": [dict(e) for e in batch.added],
            "updated": [dict(e) for e in batch.updated],
            "removed": [dict(e) for e in batch.removed],
        }
        return [
            OutboundMessage(topic=topic_template, payload=_encode(payload, "payload"))
        ]

    messages: list[OutboundMessage] = []
    for entities, op in (
        (batch.added, ChangeOperation.INSERT),
        (batch.updated, ChangeOperation.UPDATE),
        (batch.removed, ChangeOperation.DELETE),
    ):
        for entity in entities:
            context = build_render_context(entity, batch.query_id, batch.sequence, op)
            topic = render_template(topic_template, context)
            _encode(topic, "topic")
            if payload_template is not None:
                payload = _encode(render_template(payload_template, context), "payload")
            else:
                payload = _encode(context, "payload")
            messages.append(OutboundMessage(topic=topic, payload=payload))
    return messages


class OutboundRenderer:
    """Holds a reaction's templates and renders batches against them."""

    def __init__(self, topic_template: str, payload_template: str | None = None):
        self._topic_template = topic_template
        self._payload_template = payload_template

    @property
    def topic_template(self) -> str:
        return self._topic_template

    @property
    def payload_template(self) -> str | None:
        return self._payload_template

    @property
    def split_mode(self) -> bool:
        return is_split_mode(self._topic_template, self._payload_template)

    def render(self, batch: ChangeBatch) -> list[OutboundMessage]:
        return render_batch(batch, self._topic_template, self._payload_template)
