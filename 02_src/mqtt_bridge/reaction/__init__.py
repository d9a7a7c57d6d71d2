"""Reaction module."""

from .reaction import BrokerReaction, IReaction

__all__ = ["BrokerReaction", "IReaction"]
