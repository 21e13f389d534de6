"""Impact Propagator - Finds everything that depends, directly or transitively, on changed files."""

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from ..core.graph import (
    Edge, Graph, canonical_id, detect_node_type, is_package_id, load_graph, normalize_path
)

logger = logging.getLogger(__name__)


@dataclass
class ImpactOptions:
    """Traversal bounds."""
    include_dynamic: bool = True
    depth: Optional[int] = None  # None means unbounded

    def __post_init__(self):
        if self.depth is not None and self.depth < 0:
            raise ValueError(f"depth must be non-negative, got {self.depth}")


@dataclass
class ImpactedNode:
    """A node reached from the seeds, with its minimum hop count."""
    id: str
    distance: int
    type: str

    def to_dict(self) -> Dict:
        return {'id': self.id, 'distance': self.distance, 'type': self.type}


@dataclass
class ImpactResult:
    """Result of an impact traversal."""
    seeds: Set[str]
    results: List[ImpactedNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'seeds': sorted(self.seeds),
            'results': [r.to_dict() for r in self.results],
            'edges': [e.to_dict() for e in self.edges],
        }


def normalize_seed(path: Union[str, Path], project_root: str) -> str:
    """Map a caller-supplied path onto the graph's canonical id form.

    Absolute paths are made relative to the project root; relative paths are
    already taken to be project-relative. ``pkg:`` ids pass through.
    """
    path = str(path)
    if is_package_id(path):
        return path
    if os.path.isabs(path):
        return canonical_id(path, project_root)
    return Path(os.path.normpath(path.replace('\\', '/'))).as_posix()


class ImpactPropagator:
    """Breadth-first search over reverse dependency edges.

    Walking from a dependency to its dependents answers "what imports this?".
    Each node gets a distance once, at first discovery, which BFS guarantees
    is the minimum over all seeds.

    Absolute seed paths are made relative to ``project_root``, which defaults
    to the root recorded in the graph. Pass the current location when the
    snapshot was built elsewhere.
    """

    def __init__(self, graph: Graph, options: Optional[ImpactOptions] = None,
                 project_root: Optional[Union[str, Path]] = None):
        self.graph = graph
        self.options = options or ImpactOptions()
        self.project_root = normalize_path(project_root) if project_root else graph.meta.project_root
        self.reverse = graph.reverse_index()

    def compute(self, seed_paths: Iterable[Union[str, Path]]) -> ImpactResult:
        seeds = {normalize_seed(p, self.project_root) for p in seed_paths}
        depth = self.options.depth

        distances: Dict[str, int] = {}
        queue = deque()
        for seed in sorted(seeds):
            distances[seed] = 0
            queue.append(seed)

        edges: Dict[Tuple[str, str], Edge] = {}
        while queue:
            current = queue.popleft()
            current_distance = distances[current]
            if depth is not None and current_distance >= depth:
                continue

            for entry in self.reverse.get(current, []):
                dynamic = bool(entry.get('dynamic', False))
                if dynamic and not self.options.include_dynamic:
                    continue
                dependent = entry['from']
                key = (dependent, current)
                recorded = edges.get(key)
                # Tie-break for duplicate pairs: a static edge wins over a dynamic one
                if recorded is None or (recorded.dynamic and not dynamic):
                    edges[key] = Edge(source=dependent, target=current,
                                      kind=entry.get('kind', 'import'), dynamic=dynamic)
                if dependent not in distances:
                    distances[dependent] = current_distance + 1
                    queue.append(dependent)

        results = [
            ImpactedNode(id=node_id, distance=distance, type=detect_node_type(node_id))
            for node_id, distance in distances.items()
            if node_id not in seeds
        ]
        results.sort(key=lambda r: (r.distance, r.id))
        logger.debug("Impact of %d seeds: %d nodes, %d edges", len(seeds), len(results), len(edges))
        return ImpactResult(seeds=seeds, results=results, edges=list(edges.values()))


def compute_impact(graph: Graph, seed_paths: Iterable[Union[str, Path]],
                   include_dynamic: bool = True, depth: Optional[int] = None,
                   project_root: Optional[Union[str, Path]] = None) -> ImpactResult:
    """Compute what is affected when ``seed_paths`` change."""
    options = ImpactOptions(include_dynamic=include_dynamic, depth=depth)
    return ImpactPropagator(graph, options, project_root).compute(seed_paths)


def impact_from_snapshot(project_root: Union[str, Path], files: Iterable[Union[str, Path]],
                         include_dynamic: bool = True, depth: Optional[int] = None) -> ImpactResult:
    """Load the persisted graph and compute impact; raises SnapshotError without one."""
    graph = load_graph(project_root)
    return compute_impact(graph, files, include_dynamic=include_dynamic, depth=depth,
                          project_root=project_root)
