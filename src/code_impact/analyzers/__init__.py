"""Graph construction and impact analysis."""

from .alias_resolver import ResolveConfig, load_resolve_config, DEFAULT_EXTENSIONS
from .file_discovery import discover_files, resolve_roots
from .specifier_resolver import SpecifierResolver
from .import_graph_builder import ImportGraphBuilder, BuildOptions, build_graph
from .impact_propagator import (
    ImpactPropagator, ImpactOptions, ImpactResult, ImpactedNode,
    compute_impact, impact_from_snapshot
)
from .dependency_tracker import DependencyTracker, DependencyMetrics

__all__ = [
    "ResolveConfig", "load_resolve_config", "DEFAULT_EXTENSIONS",
    "discover_files", "resolve_roots",
    "SpecifierResolver",
    "ImportGraphBuilder", "BuildOptions", "build_graph",
    "ImpactPropagator", "ImpactOptions", "ImpactResult", "ImpactedNode",
    "compute_impact", "impact_from_snapshot",
    "DependencyTracker", "DependencyMetrics",
]
