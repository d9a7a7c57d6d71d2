"""Outbound module: change batches to broker messages."""

from .renderer import (
    OutboundRenderer,
    build_render_context,
    encode_json,
    is_split_mode,
    render_batch,
)

__all__ = [
    "OutboundRenderer",
    "build_render_context",
    "encode_json",
    "is_split_mode",
    "render_batch",
]
