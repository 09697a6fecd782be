from pathlib import Path

import pytest

from linkgraph.config import CONFIG_FILENAME, EngineConfig, LayoutDefaults, find_config, load_config
from linkgraph.errors import ConfigError
from linkgraph.models import CLUSTER_COLORS


def test_missing_config_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config == EngineConfig()
    assert config.layout == LayoutDefaults(width=800.0, height=600.0, iterations=100, damping=0.9, seed=42)
    assert config.colors == CLUSTER_COLORS
    assert config.source is None
    assert find_config(tmp_path) is None


def test_vault_config_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(
        "\n".join(
            [
                "layout:",
                "  width: 1024",
                "  iterations: 250",
                "colors:",
                "  Math: '#000000'",
                "  chemistry: '#00ff00'",
                "unknown_key: ignored",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.source == path
    assert config.layout.width == 1024.0
    assert config.layout.height == 600.0
    assert config.layout.iterations == 250
    assert config.colors["math"] == "#000000"
    assert config.colors["chemistry"] == "#00ff00"
    assert config.colors["physics"] == CLUSTER_COLORS["physics"]


def test_explicit_path_wins_over_vault_file(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("layout:\n  seed: 1\n", encoding="utf-8")
    other = tmp_path / "other.yml"
    other.write_text("layout:\n  seed: 2\n", encoding="utf-8")

    assert load_config(tmp_path, path=other).layout.seed == 2


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("", encoding="utf-8")

    assert load_config(tmp_path).layout == LayoutDefaults()


@pytest.mark.parametrize(
    "text",
    [
        "layout: [unclosed\n",
        "- just\n- a list\n",
        "layout: 5\n",
        "layout:\n  width: wide\n",
        "colors: [red]\n",
        "colors:\n  math: ''\n",
    ],
)
def test_malformed_config_raises(tmp_path: Path, text: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(text, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unreadable_explicit_path_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="cannot read"):
        load_config(path=tmp_path / "nope.yml")
