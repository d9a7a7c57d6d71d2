"""Source module."""

from .source import BrokerSource, ChangeHandler, ISource

__all__ = ["BrokerSource", "ChangeHandler", "ISource"]
