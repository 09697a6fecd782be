import json
from pathlib import Path

from linkgraph.commands.graph_cmd import run_communities
from linkgraph.graph.communities import CommunityResult, detect_communities
from linkgraph.models import Edge, Node
from conftest import write_note


def _nodes(*ids: str) -> list[Node]:
    return [Node(id=i, name=i) for i in ids]


def _edges(*pairs: tuple[str, str]) -> list[Edge]:
    return [Edge(source=a, target=b) for a, b in pairs]


def test_equal_sized_communities_keep_the_source_label(abc_nodes: list[Node], abc_edges: list[Edge]) -> None:
    result = detect_communities(abc_nodes, abc_edges)

    assert result.community_by_node_id == {"A": 0, "B": 0, "C": 2}
    assert [(g.id, g.node_ids) for g in result.groups] == [(0, ["A", "B"]), (2, ["C"])]


def test_smaller_community_is_absorbed_into_larger() -> None:
    # {A, B} forms first; C then joins it even though C is the edge source
    result = detect_communities(_nodes("A", "B", "C"), _edges(("A", "B"), ("C", "A")))

    assert result.community_by_node_id == {"A": 0, "B": 0, "C": 0}


def test_every_member_of_the_absorbed_community_is_relabeled() -> None:
    nodes = _nodes("a", "b", "c", "d", "e")
    edges = _edges(("a", "b"), ("c", "d"), ("d", "e"), ("b", "c"))

    result = detect_communities(nodes, edges)

    assert len(set(result.community_by_node_id.values())) == 1
    assert result.groups[0].size == 5


def test_disconnected_parts_stay_separate() -> None:
    nodes = _nodes("a", "b", "c", "d", "lonely")
    edges = _edges(("a", "b"), ("c", "d"))

    result = detect_communities(nodes, edges)

    assert [sorted(g.node_ids) for g in result.groups] == [["a", "b"], ["c", "d"], ["lonely"]]


def test_every_node_gets_exactly_one_community() -> None:
    nodes = _nodes("a", "b", "c", "d")
    edges = _edges(("a", "b"), ("b", "ghost"), ("c", "c"))

    result = detect_communities(nodes, edges)

    assert set(result.community_by_node_id) == {"a", "b", "c", "d"}
    assert sorted(n for g in result.groups for n in g.node_ids) == ["a", "b", "c", "d"]


def test_contracted_groups_have_nothing_left_to_merge() -> None:
    nodes = _nodes("a", "b", "c", "d", "e", "f")
    edges = _edges(("a", "b"), ("b", "c"), ("d", "e"), ("c", "a"))

    result = detect_communities(nodes, edges)

    # One node per group, keeping only edges that cross groups
    label = result.community_by_node_id
    contracted_nodes = _nodes(*(str(g.id) for g in result.groups))
    contracted_edges = [
        Edge(source=str(label[e.source]), target=str(label[e.target]))
        for e in edges
        if label[e.source] != label[e.target]
    ]
    again = detect_communities(contracted_nodes, contracted_edges)

    assert contracted_edges == []
    assert len(again.groups) == len(result.groups)


def test_max_iterations_zero_leaves_singletons() -> None:
    result = detect_communities(_nodes("a", "b"), _edges(("a", "b")), max_iterations=0)

    assert result.community_by_node_id == {"a": 0, "b": 1}


def test_result_wire_form() -> None:
    result = detect_communities(_nodes("a", "b"), _edges(("a", "b")))
    data = result.to_dict()

    assert data == {"communityByNodeId": {"a": 0, "b": 0}, "groups": [{"id": 0, "nodeIds": ["a", "b"], "size": 2}]}
    assert CommunityResult.from_dict(data) == result


def test_run_communities_writes_json_report(tmp_path: Path) -> None:
    vault = tmp_path / "vault"
    write_note(vault / "a.md", tags=["math"], links=["b"])
    write_note(vault / "b.md", tags=["math"], links=["a"])
    write_note(vault / "c.md", tags=["physics"], links=["d"])
    write_note(vault / "d.md", tags=["physics"])

    out = tmp_path / "communities.json"
    code = run_communities(vault, fmt="json", out=out)
    assert code == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["community_count"] == 2
    members = sorted(sorted(row["members"]) for row in payload["communities"])
    assert members == [["a", "b"], ["c", "d"]]
    clusters = {tuple(sorted(row["members"])): row["clusters"] for row in payload["communities"]}
    assert clusters[("a", "b")] == {"math": 2}


def test_run_communities_markdown(sample_vault: Path, capsys) -> None:
    code = run_communities(sample_vault, fmt="md")
    assert code == 0

    out = capsys.readouterr().out
    assert out.startswith("# Communities")
    assert "- Communities: 2" in out
    assert "`algebra`" in out
