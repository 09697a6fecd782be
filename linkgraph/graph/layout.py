"""Force-directed layout (Fruchterman-Reingold style).

Each run copies the input nodes into a private working arena of mutable
bodies, simulates on that arena only, and returns fresh ``Node`` objects
carrying the final positions. Callers' nodes are never mutated.

Forces are not reset between iterations: the accumulator decays by
``FORCE_DECAY`` after every integration step and keeps the remainder.
Each step moves a node at most the current temperature, which starts at
a tenth of the larger canvas side and cools linearly towards zero.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from ..errors import EngineError, InvalidPayload
from ..models import Edge, Node, Position

logger = logging.getLogger(__name__)

FORCE_DECAY = 0.8
ATTRACTION_SCALE = 0.5
# Initial temperature as a fraction of max(width, height)
TEMPERATURE_SCALE = 0.1


@dataclass(frozen=True)
class LayoutSettings:
    """Canvas size and simulation parameters for one layout run."""

    width: float
    height: float
    iterations: int = 100
    damping: float = 0.9

    def __post_init__(self) -> None:
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            raise InvalidPayload(f"width and height must be finite, got {self.width}x{self.height}")
        if not self.width > 0 or not self.height > 0:
            raise InvalidPayload(f"width and height must be positive, got {self.width}x{self.height}")
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise InvalidPayload(f"iterations must be a whole number, got {self.iterations!r}")
        if self.iterations < 0:
            raise InvalidPayload(f"iterations must be >= 0, got {self.iterations}")
        if not 0 < self.damping <= 1:
            raise InvalidPayload(f"damping must be in (0, 1], got {self.damping}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "iterations": self.iterations,
            "damping": self.damping,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LayoutSettings:
        if not isinstance(data, Mapping):
            raise InvalidPayload("layout settings must be a mapping")
        try:
            return cls(
                width=float(data["width"]),
                height=float(data["height"]),
                iterations=_whole_number(data.get("iterations", 100)),
                damping=float(data.get("damping", 0.9)),
            )
        except KeyError as e:
            raise InvalidPayload(f"layout settings missing {e.args[0]!r}") from e
        except (TypeError, ValueError) as e:
            raise InvalidPayload(f"invalid layout settings: {e}") from e


def _whole_number(value: Any) -> int:
    """Coerce an iteration count, refusing fractions instead of truncating them."""
    if isinstance(value, bool):
        raise InvalidPayload(f"iterations must be a whole number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidPayload(f"iterations must be a whole number, got {value!r}")
        return int(value)
    return int(value)


@dataclass
class _Body:
    """Simulation state for one node: position plus force accumulator."""

    x: float
    y: float
    fx: float = 0.0
    fy: float = 0.0


def calculate_layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    settings: LayoutSettings,
) -> list[Node]:
    """Run the force simulation and return positioned copies of ``nodes``.

    Nodes without a position start at (0, 0); the solver never randomizes
    (see ``seed_positions``). Edges naming unknown ids are ignored.
    """
    if not nodes:
        return []

    # Working arena keyed by id, in input order
    bodies: dict[str, _Body] = {}
    for node in nodes:
        if node.id in bodies:
            continue
        pos = node.position
        bodies[node.id] = _Body(x=pos.x, y=pos.y) if pos else _Body(x=0.0, y=0.0)

    k = math.sqrt((settings.width * settings.height) / len(bodies))
    links = [
        (bodies[e.source], bodies[e.target])
        for e in edges
        if e.source in bodies and e.target in bodies and e.source != e.target
    ]
    arena = list(bodies.values())
    start_temperature = max(settings.width, settings.height) * TEMPERATURE_SCALE

    for step in range(settings.iterations):
        # Repulsion between every ordered pair of distinct nodes
        for a in arena:
            for b in arena:
                if a is b:
                    continue
                dx = a.x - b.x
                dy = a.y - b.y
                distance = max(1.0, math.sqrt(dx * dx + dy * dy))
                repulsion = (k * k) / distance
                a.fx += (dx / distance) * repulsion
                a.fy += (dy / distance) * repulsion

        # Attraction along edges
        for source, target in links:
            dx = target.x - source.x
            dy = target.y - source.y
            distance = max(1.0, math.sqrt(dx * dx + dy * dy))
            attraction = (distance * distance) / k * ATTRACTION_SCALE
            fx = (dx / distance) * attraction
            fy = (dy / distance) * attraction
            source.fx += fx
            source.fy += fy
            target.fx -= fx
            target.fy -= fy

        # Integrate with the step capped at the temperature, then decay the accumulator
        temperature = start_temperature * (1 - step / settings.iterations)
        for body in arena:
            dx = body.fx * settings.damping
            dy = body.fy * settings.damping
            length = math.hypot(dx, dy)
            if length > temperature:
                dx *= temperature / length
                dy *= temperature / length
            body.x += dx
            body.y += dy
            body.fx *= FORCE_DECAY
            body.fy *= FORCE_DECAY

    if not all(math.isfinite(body.x) and math.isfinite(body.y) for body in arena):
        raise EngineError("Layout produced non-finite coordinates")

    logger.debug(
        "Layout finished: %d nodes, %d edges, %d iterations (k=%.3f)",
        len(arena),
        len(links),
        settings.iterations,
        k,
    )

    result: list[Node] = []
    emitted: set[str] = set()
    for node in nodes:
        if node.id in emitted:
            continue
        emitted.add(node.id)
        body = bodies[node.id]
        result.append(replace(node, tags=list(node.tags), position=Position(x=body.x, y=body.y)))
    return result


def seed_positions(
    nodes: Sequence[Node],
    width: float,
    height: float,
    *,
    seed: int | None = 0,
    overwrite: bool = False,
) -> list[Node]:
    """Return copies of ``nodes`` with uniform random starting positions.

    Nodes that already have a position keep it unless ``overwrite`` is set.
    The same seed always yields the same positions.
    """
    rng = random.Random(seed)
    seeded: list[Node] = []
    for node in nodes:
        if node.position is not None and not overwrite:
            seeded.append(replace(node, tags=list(node.tags)))
            continue
        position = Position(x=rng.uniform(0, width), y=rng.uniform(0, height))
        seeded.append(replace(node, tags=list(node.tags), position=position))
    return seeded
