"""Engine configuration loaded from ``linkgraph.yml``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .models import CLUSTER_COLORS

CONFIG_FILENAME = "linkgraph.yml"


@dataclass
class LayoutDefaults:
    width: float = 800.0
    height: float = 600.0
    iterations: int = 100
    damping: float = 0.9
    seed: int = 42


@dataclass
class EngineConfig:
    layout: LayoutDefaults = field(default_factory=LayoutDefaults)
    colors: dict[str, str] = field(default_factory=lambda: dict(CLUSTER_COLORS))
    source: Path | None = None


def _layout_from(data: Any) -> LayoutDefaults:
    if data is None:
        return LayoutDefaults()
    if not isinstance(data, dict):
        raise ConfigError("'layout' must be a mapping")
    defaults = LayoutDefaults()
    try:
        return LayoutDefaults(
            width=float(data.get("width", defaults.width)),
            height=float(data.get("height", defaults.height)),
            iterations=int(data.get("iterations", defaults.iterations)),
            damping=float(data.get("damping", defaults.damping)),
            seed=int(data.get("seed", defaults.seed)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid 'layout' value: {e}") from e


def _colors_from(data: Any) -> dict[str, str]:
    colors = dict(CLUSTER_COLORS)
    if data is None:
        return colors
    if not isinstance(data, dict):
        raise ConfigError("'colors' must be a mapping of cluster -> color")
    for cluster, color in data.items():
        if not isinstance(color, str) or not color.strip():
            raise ConfigError(f"color for cluster '{cluster}' must be a non-empty string")
        colors[str(cluster).strip().lower()] = color.strip()
    return colors


def find_config(vault_path: Path) -> Path | None:
    candidate = vault_path / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(vault_path: Path | None = None, path: Path | None = None) -> EngineConfig:
    """Load configuration from ``path`` or ``<vault>/linkgraph.yml``.

    A missing file yields the defaults. Unknown keys are ignored.
    """
    if path is None and vault_path is not None:
        path = find_config(vault_path)
    if path is None:
        return EngineConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    return EngineConfig(
        layout=_layout_from(data.get("layout")),
        colors=_colors_from(data.get("colors")),
        source=path,
    )
