"""Markdown parsing utilities for wiki-links and inline tags."""

import re

# Match [[target]], [[target|display]], [[target#section]], [[target#section|display]]
# An optional leading "!" marks an embed (![[image.png]]).
WIKILINK_PATTERN = re.compile(r"(!?)\[\[([^\]|#]+)(?:#[^\]|]+)?(?:\|[^\]]+)?\]\]")

# Match #tag or #nested/tag, but not headings ("# Title") or anchors inside words
INLINE_TAG_PATTERN = re.compile(r"(?<![\w#/&])#([A-Za-z_][\w/-]*)")

FENCED_CODE_PATTERN = re.compile(r"^```.*?^```", re.MULTILINE | re.DOTALL)

# Embeds of these file types point at attachments, not notes
ASSET_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".pdf", ".mp3", ".mp4"}


def _is_asset(target: str) -> bool:
    dot = target.rfind(".")
    return dot != -1 and target[dot:] in ASSET_EXTENSIONS


def extract_links(content: str) -> list[str]:
    """Extract all wiki-link targets from content.

    Returns normalized (lowercase) link targets, deduplicated in order of first
    appearance. Embedded attachments (``![[diagram.svg]]``) are skipped.
    """
    seen = set()
    result = []
    for bang, target in WIKILINK_PATTERN.findall(content):
        normalized = target.lower().strip()
        if not normalized:
            continue
        if bang and _is_asset(normalized):
            continue
        if normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


def extract_tags(content: str) -> list[str]:
    """Extract inline ``#tags`` from content, skipping fenced code blocks."""
    text = FENCED_CODE_PATTERN.sub("", content)
    seen = set()
    result = []
    for tag in INLINE_TAG_PATTERN.findall(text):
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def normalize_tags(value) -> list[str]:
    """Normalize a frontmatter ``tags`` value to a list of tag strings.

    Frontmatter tags can be:
    - List of strings: ["math", "#physics"]
    - Single string, comma or space separated: "math, physics"
    """
    if not value:
        return []

    if isinstance(value, str):
        value = re.split(r"[,\s]+", value)

    result = []
    for entry in value:
        tag = str(entry).strip().lstrip("#")
        if tag and tag not in result:
            result.append(tag)
    return result
