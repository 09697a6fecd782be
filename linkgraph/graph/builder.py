"""Graph model construction from linked documents."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping, Sequence

from ..models import Document, Edge, GraphModel, Node, cluster_color
from ..vault.parser import extract_links

logger = logging.getLogger(__name__)

LinkParser = Callable[[str], list[str]]

MIN_WEIGHT = 12
MAX_WEIGHT = 30
MIN_STRENGTH = 0.3
MAX_STRENGTH = 1.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def node_weight(connection_count: int) -> int:
    """Visual size of a node: grows with its link count, clamped to [12, 30]."""
    return int(_clamp(15 + 2 * connection_count, MIN_WEIGHT, MAX_WEIGHT))


def edge_strength(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """Edge strength: 0.5 plus 0.3 per shared tag, clamped to [0.3, 1.0]."""
    shared = len(set(tags_a) & set(tags_b))
    return _clamp(0.5 + 0.3 * shared, MIN_STRENGTH, MAX_STRENGTH)


def calculate_centrality(nodes: Sequence[Node], edges: Sequence[Edge]) -> dict[str, float]:
    """Return node id -> (in-degree + out-degree) / total edge count.

    Edges referencing ids outside ``nodes`` are counted in the total but
    credit no node.
    """
    total = max(1, len(edges))
    counts: dict[str, int] = {n.id: 0 for n in nodes}
    for edge in edges:
        if edge.source in counts:
            counts[edge.source] += 1
        if edge.target in counts:
            counts[edge.target] += 1
    return {node_id: min(1.0, count / total) for node_id, count in counts.items()}


class _NameIndex:
    """Case-insensitive lookup of link targets by document name, then by id."""

    def __init__(self, documents: Sequence[Document]):
        self._by_name: dict[str, str] = {}
        self._by_id: dict[str, str] = {}
        for doc in documents:
            self._by_name.setdefault(doc.name.lower().strip(), doc.id)
            self._by_id.setdefault(doc.id.lower(), doc.id)
            if doc.id.lower().endswith(".md"):
                self._by_id.setdefault(doc.id.lower()[:-3], doc.id)

    def resolve(self, target: str) -> str | None:
        key = target.lower().strip()
        return self._by_name.get(key) or self._by_id.get(key)


def _resolve_links(
    documents: Sequence[Document],
    link_parser: LinkParser,
) -> dict[str, list[str]]:
    """Map document id -> resolved outbound target ids (no self-links)."""
    index = _NameIndex(documents)
    resolved: dict[str, list[str]] = {}
    dropped = 0

    for doc in documents:
        if doc.is_container:
            continue
        targets: list[str] = []
        for link in link_parser(doc.content):
            target_id = index.resolve(link)
            if target_id is None or target_id == doc.id:
                dropped += 1
                continue
            targets.append(target_id)
        resolved[doc.id] = targets

    if dropped:
        logger.debug("Dropped %d unresolved or self-referencing link(s)", dropped)
    return resolved


def build_graph(
    documents: Sequence[Document],
    *,
    link_parser: LinkParser = extract_links,
    colors: Mapping[str, str] | None = None,
) -> GraphModel:
    """Build a fresh node/edge model from documents.

    Args:
        documents: Notes and folders to turn into nodes
        link_parser: Returns the link target names referenced by a content string
        colors: Cluster color table overriding the default one

    Returns:
        GraphModel whose edges only reference ids present in its nodes
    """
    if not documents:
        return GraphModel()

    # Later duplicates of an id are ignored
    unique: dict[str, Document] = {}
    for doc in documents:
        unique.setdefault(doc.id, doc)
    docs = list(unique.values())

    resolved = _resolve_links(docs, link_parser)

    nodes: list[Node] = []
    for doc in docs:
        connection_count = len(resolved.get(doc.id, []))
        node = Node(
            id=doc.id,
            name=doc.name,
            kind=doc.kind,
            tags=list(doc.tags),
            connection_count=connection_count,
            weight=node_weight(connection_count),
        )
        node.color = cluster_color(node.cluster, colors)
        nodes.append(node)

    edges: list[Edge] = []
    seen_pairs: set[frozenset[str]] = set()

    def add_edge(source: str, target: str, kind: str, bidirectional: bool) -> None:
        pair = frozenset((source, target))
        if pair in seen_pairs:
            return
        seen_pairs.add(pair)
        edges.append(
            Edge(
                source=source,
                target=target,
                kind=kind,
                strength=edge_strength(unique[source].tags, unique[target].tags),
                bidirectional=bidirectional,
            )
        )

    # Reference edges from wiki-links
    for doc in docs:
        for target_id in resolved.get(doc.id, []):
            links_back = doc.id in resolved.get(target_id, [])
            add_edge(doc.id, target_id, "reference", links_back)

    # Containment edges from folder parents
    for doc in docs:
        parent = doc.parent_id
        if parent is None or parent == doc.id:
            continue
        if parent not in unique:
            logger.debug("Dropped containment edge to unknown parent %s", parent)
            continue
        add_edge(parent, doc.id, "containment", False)

    centrality = calculate_centrality(nodes, edges)
    for node in nodes:
        node.centrality = centrality[node.id]

    logger.info("Built graph: %d nodes, %d edges", len(nodes), len(edges))
    return GraphModel(nodes=nodes, edges=edges)
