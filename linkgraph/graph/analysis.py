"""Network metrics and neighborhood queries on an undirected view of the graph."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from ..models import Edge, Node


@dataclass
class NetworkAnalysis:
    node_count: int
    edge_count: int
    density: float
    avg_degree: float
    avg_clustering_coefficient: float
    degree_by_node_id: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "density": self.density,
            "avgDegree": self.avg_degree,
            "avgClusteringCoefficient": self.avg_clustering_coefficient,
            "degreeByNodeId": dict(self.degree_by_node_id),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkAnalysis:
        return cls(
            node_count=int(data["nodeCount"]),
            edge_count=int(data["edgeCount"]),
            density=float(data["density"]),
            avg_degree=float(data["avgDegree"]),
            avg_clustering_coefficient=float(data["avgClusteringCoefficient"]),
            degree_by_node_id={str(k): int(v) for k, v in data["degreeByNodeId"].items()},
        )


def _undirected_edge_view(
    node_ids: Sequence[str], edges: Sequence[Edge]
) -> tuple[list[tuple[str, str]], dict[str, set[str]]]:
    """Return (unique_pairs, adjacency) restricted to known ids.

    Self-loops and repeated pairs (in either direction) are collapsed, so a
    bidirectional edge contributes one pair.
    """
    known = set(node_ids)
    adjacency: dict[str, set[str]] = {n: set() for n in node_ids}
    pairs: list[tuple[str, str]] = []
    seen: set[frozenset[str]] = set()

    for edge in edges:
        a, b = edge.source, edge.target
        if a == b or a not in known or b not in known:
            continue
        key = frozenset((a, b))
        if key in seen:
            continue
        seen.add(key)
        pairs.append((a, b))
        adjacency[a].add(b)
        adjacency[b].add(a)

    return pairs, adjacency


def _ordered_ids(nodes: Sequence[Node]) -> list[str]:
    ids: list[str] = []
    seen: set[str] = set()
    for node in nodes:
        if node.id not in seen:
            seen.add(node.id)
            ids.append(node.id)
    return ids


def _local_clustering(neighbors: set[str], adjacency: dict[str, set[str]]) -> float:
    ordered = sorted(neighbors)
    links = 0
    for i, a in enumerate(ordered):
        for b in ordered[i + 1 :]:
            if b in adjacency[a]:
                links += 1
    possible = len(ordered) * (len(ordered) - 1) / 2
    return links / possible


def analyze_network(nodes: Sequence[Node], edges: Sequence[Edge]) -> NetworkAnalysis:
    """Compute density, average degree, average clustering and per-node degree.

    Nodes with fewer than two neighbors are left out of the clustering average;
    when none qualify the average is 0.
    """
    node_ids = _ordered_ids(nodes)
    pairs, adjacency = _undirected_edge_view(node_ids, edges)

    n = len(node_ids)
    m = len(pairs)
    degree = {node_id: len(adjacency[node_id]) for node_id in node_ids}

    density = m / (n * (n - 1) / 2) if n > 1 else 0.0
    avg_degree = sum(degree.values()) / n if n else 0.0

    coefficients = [
        _local_clustering(adjacency[node_id], adjacency)
        for node_id in node_ids
        if len(adjacency[node_id]) >= 2
    ]
    avg_clustering = sum(coefficients) / len(coefficients) if coefficients else 0.0

    return NetworkAnalysis(
        node_count=n,
        edge_count=m,
        density=round(density, 3),
        avg_degree=round(avg_degree, 2),
        avg_clustering_coefficient=round(avg_clustering, 3),
        degree_by_node_id=degree,
    )


def connected_nodes(node_id: str, edges: Sequence[Edge]) -> list[str]:
    """Ids directly connected to ``node_id``, in edge order."""
    result: list[str] = []
    for edge in edges:
        if edge.source == node_id and edge.target != node_id:
            other = edge.target
        elif edge.target == node_id and edge.source != node_id:
            other = edge.source
        else:
            continue
        if other not in result:
            result.append(other)
    return result


def nodes_by_tag(nodes: Sequence[Node], tag: str) -> list[Node]:
    return [n for n in nodes if tag in n.tags]


def nodes_by_cluster(nodes: Sequence[Node], cluster: str) -> list[Node]:
    return [n for n in nodes if n.cluster == cluster]


def clusters(nodes: Sequence[Node]) -> list[str]:
    """Distinct cluster labels in order of first appearance."""
    seen: list[str] = []
    for node in nodes:
        if node.cluster not in seen:
            seen.append(node.cluster)
    return seen


def isolated_nodes(nodes: Sequence[Node], edges: Sequence[Edge]) -> list[str]:
    node_ids = _ordered_ids(nodes)
    _, adjacency = _undirected_edge_view(node_ids, edges)
    return [n for n in node_ids if not adjacency[n]]


def node_stats(node_id: str, nodes: Sequence[Node], edges: Sequence[Edge]) -> dict[str, Any] | None:
    """Summary of one node's connections, or None when the id is unknown."""
    by_id = {n.id: n for n in nodes}
    node = by_id.get(node_id)
    if node is None:
        return None

    connected = connected_nodes(node_id, edges)
    return {
        "node": node,
        "connected_nodes": [by_id[c] for c in connected if c in by_id],
        "total_connections": len(connected),
        "incoming": sum(1 for e in edges if e.target == node_id),
        "outgoing": sum(1 for e in edges if e.source == node_id),
    }


def _adjacency(edges: Sequence[Edge]) -> dict[str, list[str]]:
    adjacency: dict[str, list[str]] = {}
    for edge in edges:
        if edge.source == edge.target:
            continue
        adjacency.setdefault(edge.source, [])
        adjacency.setdefault(edge.target, [])
        if edge.target not in adjacency[edge.source]:
            adjacency[edge.source].append(edge.target)
        if edge.source not in adjacency[edge.target]:
            adjacency[edge.target].append(edge.source)
    return adjacency


def shortest_path(start: str, end: str, edges: Sequence[Edge]) -> list[str]:
    """Unweighted shortest path (BFS) from ``start`` to ``end``.

    Returns ``[start]`` when both are the same node and ``[]`` when ``end`` is
    unreachable.
    """
    if start == end:
        return [start]

    adjacency = _adjacency(edges)
    previous: dict[str, str | None] = {start: None}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        for neighbor in adjacency.get(current, []):
            if neighbor in previous:
                continue
            previous[neighbor] = current
            if neighbor == end:
                path = [end]
                step = current
                while step is not None:
                    path.append(step)
                    step = previous[step]
                return list(reversed(path))
            queue.append(neighbor)

    return []


def neighborhood(node_id: str, edges: Sequence[Edge], depth: int = 2) -> dict[int, list[str]]:
    """Breadth-first levels around ``node_id`` up to ``depth`` hops.

    Level 0 holds the node itself.
    """
    adjacency = _adjacency(edges)
    levels: dict[int, list[str]] = {0: [node_id]}
    visited = {node_id}
    frontier = [node_id]

    for level in range(1, max(0, depth) + 1):
        next_frontier: list[str] = []
        for current in frontier:
            for neighbor in adjacency.get(current, []):
                if neighbor not in visited:
                    visited.add(neighbor)
                    next_frontier.append(neighbor)
        if not next_frontier:
            break
        levels[level] = next_frontier
        frontier = next_frontier

    return levels
