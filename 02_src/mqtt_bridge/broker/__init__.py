"""Broker module."""

from .broker import IBrokerClient, InMemoryBroker, MessageHandler

__all__ = ["IBrokerClient", "InMemoryBroker", "MessageHandler"]
