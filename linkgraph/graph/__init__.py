"""Graph construction, layout and analysis."""

from .analysis import NetworkAnalysis, analyze_network, shortest_path
from .builder import build_graph, calculate_centrality
from .communities import CommunityGroup, CommunityResult, detect_communities
from .layout import LayoutSettings, calculate_layout, seed_positions

__all__ = [
    "NetworkAnalysis",
    "analyze_network",
    "shortest_path",
    "build_graph",
    "calculate_centrality",
    "CommunityGroup",
    "CommunityResult",
    "detect_communities",
    "LayoutSettings",
    "calculate_layout",
    "seed_positions",
]
