import logging
from pathlib import Path

from linkgraph.vault.loader import load_documents
from conftest import write_note


def test_load_documents_returns_folders_then_notes(sample_vault: Path) -> None:
    docs = load_documents(sample_vault)

    assert [d.id for d in docs] == [
        "math",
        "physics",
        "projects",
        "math/algebra.md",
        "math/calculus.md",
        "physics/mechanics.md",
        "projects/ideas.md",
    ]
    assert all(d.kind == "container" for d in docs[:3])
    assert all(d.kind == "document" for d in docs[3:])


def test_note_fields_come_from_path_and_frontmatter(sample_vault: Path) -> None:
    docs = {d.id: d for d in load_documents(sample_vault)}

    mechanics = docs["physics/mechanics.md"]
    assert mechanics.name == "mechanics"
    assert mechanics.tags == ["physics", "math"]
    assert mechanics.parent_id == "physics"
    assert "[[calculus]]" in mechanics.content
    assert not mechanics.content.startswith("---")

    assert docs["projects/ideas.md"].tags == []
    assert docs["math"].parent_id is None


def test_inline_tags_are_appended_after_frontmatter_tags(tmp_path: Path) -> None:
    vault = tmp_path / "vault"
    write_note(vault / "note.md", tags=["math"], body="Mentions #math and #proofs.")

    (doc,) = load_documents(vault)

    assert doc.tags == ["math", "proofs"]
    assert doc.parent_id is None


def test_hidden_entries_and_non_markdown_files_are_skipped(tmp_path: Path) -> None:
    vault = tmp_path / "vault"
    write_note(vault / "visible.md")
    write_note(vault / ".obsidian" / "workspace.md")
    write_note(vault / "notes" / ".draft.md")
    (vault / "notes" / "image.png").write_bytes(b"\x89PNG")
    (vault / "linkgraph.yml").write_text("layout: {}\n", encoding="utf-8")

    ids = [d.id for d in load_documents(vault)]

    assert ids == ["notes", "visible.md"]


def test_unreadable_note_is_logged_and_skipped(tmp_path: Path, caplog) -> None:
    vault = tmp_path / "vault"
    write_note(vault / "good.md")
    (vault / "bad.md").write_text("---\ntags: [unclosed\n---\n\nBody\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="linkgraph.vault.loader"):
        docs = load_documents(vault)

    assert [d.id for d in docs] == ["good.md"]
    assert any("bad.md" in r.getMessage() for r in caplog.records)
