"""Vault loading: markdown notes and folders become builder documents."""

from __future__ import annotations

import logging
from pathlib import Path

import frontmatter

from ..models import Document
from .parser import extract_tags, normalize_tags

logger = logging.getLogger(__name__)


def _is_hidden(path: Path, vault_path: Path) -> bool:
    try:
        parts = path.relative_to(vault_path).parts
    except ValueError:
        return True
    return any(part.startswith(".") for part in parts)


def _parent_id(rel: Path) -> str | None:
    parent = rel.parent.as_posix()
    return None if parent in ("", ".") else parent


def load_note(path: Path, vault_path: Path) -> Document:
    """Load a single markdown file and parse its frontmatter."""
    post = frontmatter.load(path)
    rel = path.relative_to(vault_path)

    content = post.content
    fm = post.metadata

    tags = normalize_tags(fm.get("tags"))
    for tag in extract_tags(content):
        if tag not in tags:
            tags.append(tag)

    return Document(
        id=rel.as_posix(),
        name=path.stem,
        kind="document",
        tags=tags,
        content=content,
        parent_id=_parent_id(rel),
    )


def load_folder(path: Path, vault_path: Path) -> Document:
    """Represent a vault folder as a container document."""
    rel = path.relative_to(vault_path)
    return Document(
        id=rel.as_posix(),
        name=path.name,
        kind="container",
        parent_id=_parent_id(rel),
    )


def load_documents(vault_path: Path) -> list[Document]:
    """Load all folders and markdown files from the vault.

    Args:
        vault_path: Path to the vault content directory

    Returns:
        Containers first (sorted by path), then notes (sorted by path)
    """
    vault_path = vault_path.resolve()
    containers: list[Document] = []
    notes: list[Document] = []

    for entry in sorted(vault_path.rglob("*")):
        if _is_hidden(entry, vault_path):
            continue

        if entry.is_dir():
            containers.append(load_folder(entry, vault_path))
            continue

        if entry.suffix.lower() != ".md":
            continue

        try:
            notes.append(load_note(entry, vault_path))
        except Exception as e:
            # Log error but continue loading
            logger.warning("Failed to load %s: %s", entry, e)

    logger.info("Loaded %d notes and %d folders from %s", len(notes), len(containers), vault_path)
    return containers + notes
