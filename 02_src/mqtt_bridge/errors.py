"""
Exception hierarchy for the bridge.

Every error is scoped to one message or one render call; none of them is
fatal to the process.
"""


class BridgeError(Exception):
    """
    Base exception for all bridge errors.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class ParseError(BridgeError):
    """Inbound payload is not valid JSON. The message is dropped."""

    def __init__(self, topic: str, reason: str, cause: Exception | None = None):
        super().__init__(
            f"Failed to parse payload on topic '{topic}': {reason}",
            cause=cause,
            context={"topic": topic},
        )
        self.topic = topic
        self.reason = reason


class RenderError(BridgeError):
    """Template references a missing key or is malformed."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        template: str | None = None,
    ):
        context = {}
        if key is not None:
            context["key"] = key
        if template is not None:
            context["template"] = template
        super().__init__(message, context=context)
        self.key = key
        self.template = template


class PublishError(BridgeError):
    """Broker reported a delivery failure for one message."""

    def __init__(self, topic: str, cause: Exception | None = None):
        super().__init__(
            f"Failed to publish to '{topic}'",
            cause=cause,
            context={"topic": topic},
        )
        self.topic = topic
