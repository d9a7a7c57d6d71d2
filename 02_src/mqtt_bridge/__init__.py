"""MQTT graph bridge core."""

from .app import Application, IApplication
from .broker import IBrokerClient, InMemoryBroker
from .config import OperationPolicy, ReactionSettings, SourceSettings
from .errors import BridgeError, ParseError, PublishError, RenderError
from .inbound import (
    BoundedFirstSeenTracker,
    FirstSeenTracker,
    IFirstSeenTracker,
    InboundMapper,
    map_payload,
    resolve_entity_id,
)
from .models import (
    ChangeBatch,
    ChangeEvent,
    ChangeOperation,
    DiffKind,
    OutboundMessage,
    PublishResult,
    QueryResult,
    RawMessage,
    ResultDiff,
    TraceEvent,
)
from .outbound import OutboundRenderer, render_batch
from .reaction import BrokerReaction, IReaction
from .source import BrokerSource, ISource
from .storage import IStorage, Storage
from .templates import render_template
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Configuration
    "OperationPolicy",
    "SourceSettings",
    "ReactionSettings",
    # Errors
    "BridgeError",
    "ParseError",
    "RenderError",
    "PublishError",
    # Models
    "RawMessage",
    "OutboundMessage",
    "PublishResult",
    "ChangeOperation",
    "ChangeEvent",
    "ChangeBatch",
    "DiffKind",
    "ResultDiff",
    "QueryResult",
    "TraceEvent",
    # Translation engine
    "resolve_entity_id",
    "map_payload",
    "InboundMapper",
    "IFirstSeenTracker",
    "FirstSeenTracker",
    "BoundedFirstSeenTracker",
    "render_template",
    "render_batch",
    "OutboundRenderer",
    # Components
    "IBrokerClient",
    "InMemoryBroker",
    "IStorage",
    "Storage",
    "ITracker",
    "Tracker",
    "ISource",
    "BrokerSource",
    "IReaction",
    "BrokerReaction",
]
