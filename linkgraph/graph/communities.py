"""Community detection by bounded iterative label merging.

Every node starts in its own community, labeled by its input index. Each pass
walks the edges in input order; when an edge joins two communities, the
smaller one is relabeled into the larger. On equal sizes the target's
community is absorbed into the source's label. Passes stop once nothing
merges, or after ``MAX_ITERATIONS``.

This is not a modularity optimizer. The result depends on edge order, and is
reproducible for a fixed edge order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from ..models import Edge, Node

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 50


@dataclass
class CommunityGroup:
    id: int
    node_ids: list[str]

    @property
    def size(self) -> int:
        return len(self.node_ids)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "nodeIds": list(self.node_ids), "size": self.size}


@dataclass
class CommunityResult:
    community_by_node_id: dict[str, int] = field(default_factory=dict)
    groups: list[CommunityGroup] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "communityByNodeId": dict(self.community_by_node_id),
            "groups": [g.to_dict() for g in self.groups],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CommunityResult:
        return cls(
            community_by_node_id={str(k): int(v) for k, v in data["communityByNodeId"].items()},
            groups=[CommunityGroup(id=int(g["id"]), node_ids=list(g["nodeIds"])) for g in data["groups"]],
        )


def detect_communities(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    *,
    max_iterations: int = MAX_ITERATIONS,
) -> CommunityResult:
    """Partition nodes into communities (see module docstring)."""
    label_of: dict[str, int] = {}
    for index, node in enumerate(nodes):
        label_of.setdefault(node.id, index)

    members: dict[int, list[str]] = {}
    for node_id, label in label_of.items():
        members.setdefault(label, []).append(node_id)

    passes = 0
    for _ in range(max(0, max_iterations)):
        passes += 1
        merged = 0

        for edge in edges:
            u, v = edge.source, edge.target
            if u not in label_of or v not in label_of:
                continue
            lu, lv = label_of[u], label_of[v]
            if lu == lv:
                continue

            # Smaller community is absorbed; ties absorb v's into u's
            if len(members[lu]) < len(members[lv]):
                keep, drop = lv, lu
            else:
                keep, drop = lu, lv

            for member in members[drop]:
                label_of[member] = keep
            members[keep].extend(members.pop(drop))
            merged += 1

        if merged == 0:
            break

    logger.debug("Community detection: %d communities after %d pass(es)", len(members), passes)

    # Group by label in order of first appearance in the node list
    groups: dict[int, list[str]] = {}
    for node_id, label in label_of.items():
        groups.setdefault(label, []).append(node_id)

    return CommunityResult(
        community_by_node_id=dict(label_of),
        groups=[CommunityGroup(id=label, node_ids=ids) for label, ids in groups.items()],
    )
