"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from linkgraph.graph.builder import build_graph
from linkgraph.models import Edge, GraphModel, Node
from linkgraph.vault.loader import load_documents


def write_note(path: Path, *, tags: list[str] | None = None, links: list[str] | None = None, body: str = "") -> None:
    """Write a markdown note with optional frontmatter tags and wiki-links."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    if tags is not None:
        lines.extend(["---", f"tags: [{', '.join(tags)}]", "---", ""])
    lines.extend([f"# {path.stem.title()}", ""])
    if body:
        lines.extend([body, ""])
    lines.extend(f"- [[{link}]]" for link in links or [])
    lines.append("")
    path.write_text("\n".join(lines), encoding="utf-8")


@pytest.fixture
def sample_vault(tmp_path: Path) -> Path:
    """A small vault: three linked notes across two folders, plus one loner.

    math/algebra.md      -> calculus, vectors (unresolved)
    math/calculus.md     -> algebra
    physics/mechanics.md -> calculus
    projects/ideas.md    -> missing-note (unresolved)
    """
    vault = tmp_path / "vault"
    write_note(vault / "math" / "algebra.md", tags=["math"], links=["Calculus", "Vectors"])
    write_note(vault / "math" / "calculus.md", tags=["math"], links=["algebra"])
    write_note(vault / "physics" / "mechanics.md", tags=["physics", "math"], links=["calculus"])
    write_note(vault / "projects" / "ideas.md", links=["missing-note"])
    return vault


@pytest.fixture
def sample_graph(sample_vault: Path) -> GraphModel:
    """Graph built from the sample vault."""
    return build_graph(load_documents(sample_vault))


@pytest.fixture
def abc_nodes() -> list[Node]:
    return [
        Node(id="A", name="A", tags=["math"]),
        Node(id="B", name="B", tags=["math"]),
        Node(id="C", name="C", tags=["cs"]),
    ]


@pytest.fixture
def abc_edges() -> list[Edge]:
    return [Edge(source="A", target="B")]


@pytest.fixture
def abc_payload() -> dict:
    return {
        "nodes": [
            {"id": "A", "tags": ["math"]},
            {"id": "B", "tags": ["math"]},
            {"id": "C", "tags": ["cs"]},
        ],
        "edges": [{"source": "A", "target": "B"}],
    }
