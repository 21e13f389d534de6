"""Dependency graph and change impact analysis for front-end projects."""

from .analyzers import build_graph, compute_impact, impact_from_snapshot, ImpactResult, ImpactedNode
from .core import Graph, Node, Edge, LineRange, save_graph, load_graph, get_changed_files, get_changed_ranges
from .exceptions import CodeImpactError, ConfigurationError, ParseError, SnapshotError

__version__ = "0.1.0"

__all__ = [
    "build_graph", "save_graph", "load_graph", "compute_impact", "impact_from_snapshot",
    "get_changed_files", "get_changed_ranges",
    "Graph", "Node", "Edge", "LineRange", "ImpactResult", "ImpactedNode",
    "CodeImpactError", "ConfigurationError", "ParseError", "SnapshotError",
]
