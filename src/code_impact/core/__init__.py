"""Graph model, snapshot persistence and git change sets."""

from .graph import (
    Node, Edge, Graph, GraphMeta, GraphError, NodeType, EdgeKind,
    detect_node_type, save_graph, load_graph, snapshot_path
)
from .diff_parser import (
    LineRange, GitChangeSet, parse_unified_diff, get_changed_files, get_changed_ranges
)

__all__ = [
    "Node", "Edge", "Graph", "GraphMeta", "GraphError", "NodeType", "EdgeKind",
    "detect_node_type", "save_graph", "load_graph", "snapshot_path",
    "LineRange", "GitChangeSet", "parse_unified_diff", "get_changed_files", "get_changed_ranges",
]
