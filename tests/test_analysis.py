import pytest

from linkgraph.graph.analysis import (
    NetworkAnalysis,
    analyze_network,
    clusters,
    connected_nodes,
    isolated_nodes,
    neighborhood,
    node_stats,
    nodes_by_cluster,
    nodes_by_tag,
    shortest_path,
)
from linkgraph.models import Edge, Node


def _nodes(*ids: str) -> list[Node]:
    return [Node(id=i, name=i) for i in ids]


def _edges(*pairs: tuple[str, str]) -> list[Edge]:
    return [Edge(source=a, target=b) for a, b in pairs]


def test_single_edge_among_three_nodes(abc_nodes: list[Node], abc_edges: list[Edge]) -> None:
    result = analyze_network(abc_nodes, abc_edges)

    assert result.node_count == 3
    assert result.edge_count == 1
    assert result.density == 0.333
    assert result.avg_degree == 0.67
    assert result.avg_clustering_coefficient == 0.0
    assert result.degree_by_node_id == {"A": 1, "B": 1, "C": 0}


def test_triangle_is_fully_clustered() -> None:
    result = analyze_network(_nodes("a", "b", "c"), _edges(("a", "b"), ("b", "c"), ("c", "a")))

    assert result.density == 1.0
    assert result.avg_degree == 2.0
    assert result.avg_clustering_coefficient == 1.0


def test_clustering_averages_only_nodes_with_two_neighbors() -> None:
    # Triangle a-b-c with a tail c-d: c scores 1/3, a and b score 1, d is skipped
    result = analyze_network(_nodes("a", "b", "c", "d"), _edges(("a", "b"), ("b", "c"), ("c", "a"), ("c", "d")))

    assert result.avg_clustering_coefficient == pytest.approx(round((1 + 1 + 1 / 3) / 3, 3))
    assert result.degree_by_node_id["d"] == 1


def test_reverse_duplicates_self_loops_and_dangling_edges_are_ignored() -> None:
    edges = _edges(("a", "b"), ("b", "a"), ("a", "a"), ("a", "ghost"))

    result = analyze_network(_nodes("a", "b"), edges)

    assert result.edge_count == 1
    assert result.density == 1.0
    assert result.degree_by_node_id == {"a": 1, "b": 1}


def test_density_stays_within_bounds_for_tiny_graphs() -> None:
    assert analyze_network([], []).density == 0.0
    assert analyze_network([], []).avg_degree == 0.0
    assert analyze_network(_nodes("solo"), []).density == 0.0


def test_analysis_round_trips_through_wire_form(abc_nodes: list[Node], abc_edges: list[Edge]) -> None:
    result = analyze_network(abc_nodes, abc_edges)
    data = result.to_dict()

    assert set(data) == {"nodeCount", "edgeCount", "density", "avgDegree", "avgClusteringCoefficient", "degreeByNodeId"}
    assert NetworkAnalysis.from_dict(data) == result


def test_connected_nodes_and_stats() -> None:
    nodes = _nodes("a", "b", "c")
    edges = _edges(("a", "b"), ("c", "a"), ("b", "a"))

    assert connected_nodes("a", edges) == ["b", "c"]

    stats = node_stats("a", nodes, edges)
    assert stats["node"].id == "a"
    assert [n.id for n in stats["connected_nodes"]] == ["b", "c"]
    assert stats["total_connections"] == 2
    assert stats["incoming"] == 2
    assert stats["outgoing"] == 1
    assert node_stats("missing", nodes, edges) is None


def test_tag_and_cluster_queries() -> None:
    nodes = [
        Node(id="a", name="a", tags=["math", "physics"]),
        Node(id="b", name="b", tags=["physics"]),
        Node(id="c", name="c"),
    ]

    assert [n.id for n in nodes_by_tag(nodes, "physics")] == ["a", "b"]
    assert [n.id for n in nodes_by_cluster(nodes, "math")] == ["a"]
    assert [n.id for n in nodes_by_cluster(nodes, "uncategorized")] == ["c"]
    assert clusters(nodes) == ["math", "physics", "uncategorized"]


def test_isolated_nodes() -> None:
    nodes = _nodes("a", "b", "c", "d")
    edges = _edges(("a", "b"), ("c", "c"))

    assert isolated_nodes(nodes, edges) == ["c", "d"]


def test_shortest_path_follows_links_in_either_direction() -> None:
    edges = _edges(("a", "b"), ("c", "b"), ("c", "d"), ("a", "x"), ("x", "y"), ("y", "d"))

    assert shortest_path("a", "d", edges) == ["a", "b", "c", "d"]
    assert shortest_path("d", "a", edges) == ["d", "c", "b", "a"]
    assert shortest_path("a", "a", edges) == ["a"]
    assert shortest_path("a", "nowhere", edges) == []


def test_neighborhood_levels() -> None:
    edges = _edges(("a", "b"), ("b", "c"), ("c", "d"), ("a", "e"))

    assert neighborhood("a", edges, depth=2) == {0: ["a"], 1: ["b", "e"], 2: ["c"]}
    assert neighborhood("a", edges, depth=0) == {0: ["a"]}
    assert neighborhood("lonely", edges) == {0: ["lonely"]}
