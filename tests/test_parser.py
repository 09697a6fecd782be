from linkgraph.vault.parser import extract_links, extract_tags, normalize_tags


def test_extract_links_handles_aliases_sections_and_case() -> None:
    content = "See [[Algebra]], [[calculus|the calculus note]] and [[Vectors#Dot product]]."

    assert extract_links(content) == ["algebra", "calculus", "vectors"]


def test_extract_links_deduplicates_in_first_seen_order() -> None:
    content = "[[b]] then [[a]] then [[B]] again"

    assert extract_links(content) == ["b", "a"]


def test_extract_links_skips_embedded_assets_but_keeps_note_embeds() -> None:
    content = "![[meta/graphs/a.svg]]\n![[diagram.png]]\n![[Summary]]"

    assert extract_links(content) == ["summary"]


def test_extract_tags_ignores_headings_and_code_fences() -> None:
    content = "\n".join(
        [
            "# Heading",
            "Text with #math and #physics/classical tags.",
            "```",
            "x = 1  # not-a-tag",
            "#include <stdio.h>",
            "```",
            "An url like http://example.com/#anchor is not a tag, but #math repeats.",
        ]
    )

    assert extract_tags(content) == ["math", "physics/classical"]


def test_normalize_tags_accepts_strings_and_lists() -> None:
    assert normalize_tags(None) == []
    assert normalize_tags("math, #physics") == ["math", "physics"]
    assert normalize_tags(["#math", "math", "project"]) == ["math", "project"]
