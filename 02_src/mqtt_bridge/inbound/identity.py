"""Entity identity resolution for inbound payloads."""

import uuid
from typing import Any, Mapping


def format_number(value: int | float) -> str:
    """
    Canonical decimal form of a JSON number.

    Matches JSON number spelling: exponents carry no '+' sign or leading
    zeros (1e16, 1e-7), unlike Python's repr (1e+16, 1e-07).
    """
    text = repr(value)
    mantissa, sep, exponent = text.partition("e")
    if not sep:
        return text
    return f"{mantissa}e{int(exponent)}"


def resolve_entity_id(payload: Any, id_field: str) -> str:
    """
    Determine the stable identifier of the entity a payload describes.

    Strings are returned verbatim and numbers in canonical decimal form.
    Anything else (missing field, non-object payload, or an object, array,
    boolean or null value) falls back to a fresh UUID4.
    """
    if isinstance(payload, Mapping):
        value = payload.get(id_field)
        if isinstance(value, str):
            return value
        # bool is an int subclass but is not a valid identity
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format_number(value)
    return str(uuid.uuid4())
