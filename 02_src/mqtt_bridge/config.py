"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "mqtt_bridge.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]

DEFAULT_NODE_LABEL = "MqttMessage"
DEFAULT_ID_FIELD = "id"


class OperationPolicy(str, Enum):
    """How the inbound mapper picks Insert vs Update."""

    INSERT = "insert"
    UPDATE = "update"
    FIRST_SEEN = "first_seen"


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def parse_operation_policy(value: str | None) -> OperationPolicy:
    """Parse SOURCE_OPERATION_MODE, defaulting to static insert."""
    if not value:
        return OperationPolicy.INSERT
    try:
        return OperationPolicy(value.strip().lower())
    except ValueError:
        allowed = ", ".join(p.value for p in OperationPolicy)
        raise ValueError(
            f"Invalid operation mode {value!r} (expected one of: {allowed})"
        ) from None


@dataclass
class SourceSettings:
    """Inbound side: which topic to read and how payloads become nodes."""

    source_id: str = "mqtt-source"
    topic: str = "sensors/readings"
    node_label: str = DEFAULT_NODE_LABEL
    id_field: str = DEFAULT_ID_FIELD
    operation_policy: OperationPolicy = OperationPolicy.INSERT

    @classmethod
    def from_env(cls) -> "SourceSettings":
        return cls(
            source_id=os.getenv("SOURCE_ID", "mqtt-source"),
            topic=os.getenv("SOURCE_TOPIC", "sensors/readings"),
            node_label=os.getenv("SOURCE_NODE_LABEL", DEFAULT_NODE_LABEL),
            id_field=os.getenv("SOURCE_ID_FIELD", DEFAULT_ID_FIELD),
            operation_policy=parse_operation_policy(
                os.getenv("SOURCE_OPERATION_MODE")
            ),
        )


@dataclass
class ReactionSettings:
    """Outbound side: where query results are published and in what shape."""

    reaction_id: str = "mqtt-reaction"
    topic: str = "alerts/results"
    payload_template: str | None = None
    queries: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "ReactionSettings":
        queries = os.getenv("REACTION_QUERIES", "")
        return cls(
            reaction_id=os.getenv("REACTION_ID", "mqtt-reaction"),
            topic=os.getenv("REACTION_TOPIC", "alerts/results"),
            # An empty template in .env means "not configured"
            payload_template=os.getenv("REACTION_PAYLOAD_TEMPLATE") or None,
            queries=[q.strip() for q in queries.split(",") if q.strip()],
        )
