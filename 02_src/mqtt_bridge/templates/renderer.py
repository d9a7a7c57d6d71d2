"""Placeholder substitution for topic and payload templates."""

import json
from typing import Any, Mapping

from ..errors import RenderError

OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"


def has_placeholders(template: str) -> bool:
    """Return True if the template contains a placeholder marker."""
    return OPEN_MARKER in template


def format_value(value: Any) -> str:
    """Render a JSON value as template text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def render_template(template: str, context: Mapping[str, Any]) -> str:
    """
    Substitute `{{key}}` placeholders with top-level context values.

    Args:
        template: Template text; whitespace inside the braces is ignored.
        context: Render context (entity fields plus injected metadata).

    Returns:
        The rendered string. Templates without placeholders come back unchanged.

    Raises:
        RenderError: A placeholder is unterminated, empty, or names a key that
            is not in the context.
    """
    if OPEN_MARKER not in template:
        return template

    parts: list[str] = []
    pos = 0
    while True:
        start = template.find(OPEN_MARKER, pos)
        if start == -1:
            parts.append(template[pos:])
            break

        end = template.find(CLOSE_MARKER, start + len(OPEN_MARKER))
        if end == -1:
            raise RenderError(
                f"Unterminated placeholder at offset {start}",
                template=template,
            )

        key = template[start + len(OPEN_MARKER):end].strip()
        if not key or "{" in key or "}" in key:
            raise RenderError(
                f"Invalid placeholder at offset {start}",
                template=template,
            )
        if key not in context:
            raise RenderError(
                f"Missing template key '{key}'",
                key=key,
                template=template,
            )

        parts.append(template[pos:start])
        parts.append(format_value(context[key]))
        pos = end + len(CLOSE_MARKER)

    return "".join(parts)
