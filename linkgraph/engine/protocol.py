"""Request/response messages exchanged with the graph engine.

Wire form:
    request:  {"type": OPERATION, "payload": {...}, "id": correlation_id}
    response: {"type": RESULT, "payload": {...} | {"error": message}, "id": correlation_id}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from ..errors import InvalidPayload
from ..models import Edge, Node


class OperationType(str, Enum):
    CALCULATE_LAYOUT = "CALCULATE_LAYOUT"
    ANALYZE_NETWORK = "ANALYZE_NETWORK"
    FIND_COMMUNITIES = "FIND_COMMUNITIES"
    CALCULATE_CENTRALITY = "CALCULATE_CENTRALITY"


class ResultType(str, Enum):
    LAYOUT_CALCULATED = "LAYOUT_CALCULATED"
    NETWORK_ANALYZED = "NETWORK_ANALYZED"
    COMMUNITIES_FOUND = "COMMUNITIES_FOUND"
    CENTRALITY_CALCULATED = "CENTRALITY_CALCULATED"
    ERROR = "ERROR"


RESULT_FOR_OPERATION: dict[OperationType, ResultType] = {
    OperationType.CALCULATE_LAYOUT: ResultType.LAYOUT_CALCULATED,
    OperationType.ANALYZE_NETWORK: ResultType.NETWORK_ANALYZED,
    OperationType.FIND_COMMUNITIES: ResultType.COMMUNITIES_FOUND,
    OperationType.CALCULATE_CENTRALITY: ResultType.CENTRALITY_CALCULATED,
}


def parse_operation(value: Any) -> OperationType | None:
    """Return the matching OperationType, or None for unknown values."""
    if isinstance(value, OperationType):
        return value
    try:
        return OperationType(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Request:
    type: str
    payload: Any
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        op = self.type.value if isinstance(self.type, OperationType) else self.type
        return {"type": op, "payload": self.payload, "id": self.id}

    @classmethod
    def from_dict(cls, data: Any) -> Request:
        if not isinstance(data, Mapping):
            raise InvalidPayload("request must be a mapping with 'type', 'payload' and 'id'")
        if "type" not in data:
            raise InvalidPayload("request is missing 'type'")
        return cls(type=data["type"], payload=data.get("payload"), id=data.get("id"))


@dataclass(frozen=True)
class Response:
    type: ResultType
    payload: dict[str, Any] = field(default_factory=dict)
    id: str | None = None

    @property
    def is_error(self) -> bool:
        return self.type == ResultType.ERROR

    @property
    def error(self) -> str | None:
        return self.payload.get("error") if self.is_error else None

    @classmethod
    def failure(cls, correlation_id: str | None, message: str) -> Response:
        return cls(type=ResultType.ERROR, payload={"error": message}, id=correlation_id)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "payload": self.payload, "id": self.id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Response:
        return cls(type=ResultType(data["type"]), payload=dict(data.get("payload") or {}), id=data.get("id"))


def correlation_id_of(message: Any) -> str | None:
    """Best-effort correlation id of a possibly malformed message."""
    if isinstance(message, Request):
        return message.id
    if isinstance(message, Mapping):
        return message.get("id")
    return None


def _decode_items(raw: Any, key: str, decode) -> list:
    if not isinstance(raw, (list, tuple)):
        raise InvalidPayload(f"payload '{key}' must be a list")
    items = []
    for index, item in enumerate(raw):
        if isinstance(item, (Node, Edge)):
            item = item.to_dict()
        if not isinstance(item, Mapping):
            raise InvalidPayload(f"payload '{key}[{index}]' must be a mapping")
        try:
            items.append(decode(item))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidPayload(f"payload '{key}[{index}]' is invalid: {e}") from e
    return items


def decode_graph(payload: Any) -> tuple[list[Node], list[Edge]]:
    """Decode a payload's nodes and edges into fresh model objects.

    Accepts ``edges`` or ``links`` for the edge list; a missing edge list
    means no edges. The caller's payload is left untouched.
    """
    if not isinstance(payload, Mapping):
        raise InvalidPayload("payload must be a mapping with 'nodes' and 'edges'")
    if "nodes" not in payload:
        raise InvalidPayload("payload is missing 'nodes'")

    nodes = _decode_items(payload["nodes"], "nodes", Node.from_dict)
    edge_key = "edges" if "edges" in payload else "links"
    edges = _decode_items(payload.get(edge_key, []), edge_key, Edge.from_dict)
    return nodes, edges
