"""Data models for documents and graph elements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

# Valid document kinds (file vs folder)
DocumentKind = Literal["document", "container"]

# Valid edge kinds (wiki-link vs folder parent)
EdgeKind = Literal["reference", "containment"]

DOCUMENT_KINDS: tuple[str, ...] = ("document", "container")
EDGE_KINDS: tuple[str, ...] = ("reference", "containment")

UNCATEGORIZED = "uncategorized"
DEFAULT_COLOR = "#6b7280"

# Cluster label -> node color. Unknown clusters fall back to DEFAULT_COLOR.
CLUSTER_COLORS: dict[str, str] = {
    "math": "#3b82f6",
    "physics": "#ef4444",
    "programming": "#10b981",
    "university": "#8b5cf6",
    "project": "#f59e0b",
    UNCATEGORIZED: DEFAULT_COLOR,
}


def cluster_color(cluster: str, colors: Mapping[str, str] | None = None) -> str:
    """Look up the color for a cluster label (case-insensitive)."""
    table = CLUSTER_COLORS if colors is None else colors
    key = cluster.strip().lower()
    if key in table:
        return table[key]
    return DEFAULT_COLOR


def _require_id(data: Mapping[str, Any], key: str = "id") -> str:
    value = data.get(key)
    if isinstance(value, Mapping):
        # Resolved link objects carry the node under the endpoint key.
        value = value.get("id")
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{key}' must be a non-empty string, got {value!r}")
    return value


def _string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"'{key}' must be a list of strings")
    return [str(v) for v in value]


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Position:
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class Document:
    """A source document handed to the graph builder."""

    id: str
    name: str
    kind: str = "document"
    tags: list[str] = field(default_factory=list)
    content: str = ""
    parent_id: str | None = None

    @property
    def is_container(self) -> bool:
        return self.kind == "container"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "tags": list(self.tags),
            "content": self.content,
        }
        if self.parent_id is not None:
            data["parentId"] = self.parent_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Document:
        doc_id = _require_id(data)
        kind = data.get("kind", "document")
        if kind not in DOCUMENT_KINDS:
            raise ValueError(f"document kind must be one of {DOCUMENT_KINDS}, got {kind!r}")
        return cls(
            id=doc_id,
            name=str(data.get("name") or doc_id),
            kind=kind,
            tags=_string_list(data.get("tags"), "tags"),
            content=str(data.get("content") or ""),
            parent_id=data.get("parentId", data.get("parent_id")),
        )


@dataclass
class Node:
    """A graph vertex with its precomputed display attributes."""

    id: str
    name: str
    kind: str = "document"
    tags: list[str] = field(default_factory=list)
    connection_count: int = 0
    weight: int = 15
    color: str = DEFAULT_COLOR
    centrality: float = 0.0
    position: Position | None = None

    @property
    def cluster(self) -> str:
        return self.tags[0] if self.tags else UNCATEGORIZED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "tags": list(self.tags),
            "cluster": self.cluster,
            "connectionCount": self.connection_count,
            "weight": self.weight,
            "color": self.color,
            "centrality": self.centrality,
        }
        if self.position is not None:
            data["position"] = self.position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Node:
        """Decode a node from its wire form.

        Only ``id`` is required. A position may be given either as a nested
        ``position`` mapping or as flat ``x``/``y`` keys.
        """
        node_id = _require_id(data)
        position = None
        if data.get("position") is not None:
            position = Position.from_dict(data["position"])
        elif data.get("x") is not None and data.get("y") is not None:
            position = Position(x=float(data["x"]), y=float(data["y"]))
        kind = data.get("kind", "document")
        if kind not in DOCUMENT_KINDS:
            raise ValueError(f"node kind must be one of {DOCUMENT_KINDS}, got {kind!r}")

        return cls(
            id=node_id,
            name=str(data.get("name") or node_id),
            kind=kind,
            tags=_string_list(data.get("tags"), "tags"),
            connection_count=int(data.get("connectionCount", data.get("connection_count", 0))),
            weight=int(data.get("weight", 15)),
            color=str(data.get("color") or DEFAULT_COLOR),
            centrality=float(data.get("centrality", 0.0)),
            position=position,
        )


@dataclass
class Edge:
    """An undirected-for-analysis connection between two nodes."""

    source: str
    target: str
    kind: str = "reference"
    strength: float = 0.5
    bidirectional: bool = False

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.source, self.target))

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "kind": self.kind,
            "strength": self.strength,
            "bidirectional": self.bidirectional,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Edge:
        kind = data.get("kind", "reference")
        if kind not in EDGE_KINDS:
            raise ValueError(f"edge kind must be one of {EDGE_KINDS}, got {kind!r}")
        return cls(
            source=_require_id(data, "source"),
            target=_require_id(data, "target"),
            kind=kind,
            strength=float(data.get("strength", 0.5)),
            bidirectional=bool(data.get("bidirectional", False)),
        )


@dataclass
class GraphModel:
    """Nodes and edges produced by one builder run."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
