"""Dependency Tracker - Graph statistics, cycles and import chains over a built graph."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from ..core.graph import Graph, NodeType


@dataclass
class DependencyMetrics:
    """Summary statistics of a dependency graph."""
    total_nodes: int
    total_edges: int
    nodes_by_type: Dict[str, int]
    edges_by_kind: Dict[str, int]
    dynamic_edges: int
    circular_dependencies: int
    parse_errors: int
    most_imported: List[Tuple[str, int]] = field(default_factory=list)
    most_importing: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'total_nodes': self.total_nodes,
            'total_edges': self.total_edges,
            'nodes_by_type': self.nodes_by_type,
            'edges_by_kind': self.edges_by_kind,
            'dynamic_edges': self.dynamic_edges,
            'circular_dependencies': self.circular_dependencies,
            'parse_errors': self.parse_errors,
            'most_imported': [list(item) for item in self.most_imported],
            'most_importing': [list(item) for item in self.most_importing],
        }


class DependencyTracker:
    """Analyzes a :class:`Graph` through a networkx projection.

    Parallel edges between the same pair collapse into one; an edge is
    marked dynamic only if every edge of the pair is dynamic.
    """

    def __init__(self, graph: Graph, max_cycles: int = 100):
        self.graph = graph
        self.max_cycles = max_cycles
        self.digraph = self.to_networkx(graph)

    @staticmethod
    def to_networkx(graph: Graph) -> nx.DiGraph:
        digraph = nx.DiGraph()
        for node_id, node in graph.nodes.items():
            digraph.add_node(node_id, type=node.type)
        for edge in graph.edges:
            if digraph.has_edge(edge.source, edge.target):
                data = digraph.edges[edge.source, edge.target]
                data['dynamic'] = data['dynamic'] and edge.dynamic
            else:
                digraph.add_edge(edge.source, edge.target, kind=edge.kind, dynamic=edge.dynamic)
        return digraph

    def find_cycles(self) -> List[List[str]]:
        """Import cycles between project files, at most ``max_cycles`` of them."""
        cycles = []
        for cycle in nx.simple_cycles(self.digraph):
            # Rotate so the smallest id comes first; output is then stable
            start = cycle.index(min(cycle))
            cycles.append(cycle[start:] + cycle[:start])
            if len(cycles) >= self.max_cycles:
                break
        return sorted(cycles)

    def calculate_metrics(self, top: int = 10) -> DependencyMetrics:
        nodes_by_type: Dict[str, int] = {}
        for node in self.graph.nodes.values():
            nodes_by_type[node.type] = nodes_by_type.get(node.type, 0) + 1

        edges_by_kind: Dict[str, int] = {}
        for edge in self.graph.edges:
            edges_by_kind[edge.kind] = edges_by_kind.get(edge.kind, 0) + 1

        files = [n for n, data in self.digraph.nodes(data=True) if data.get('type') != NodeType.PKG]
        imported = sorted(((n, self.digraph.in_degree(n)) for n in self.digraph.nodes),
                          key=lambda x: (-x[1], x[0]))
        importing = sorted(((n, self.digraph.out_degree(n)) for n in files),
                           key=lambda x: (-x[1], x[0]))

        return DependencyMetrics(
            total_nodes=len(self.graph.nodes),
            total_edges=len(self.graph.edges),
            nodes_by_type=nodes_by_type,
            edges_by_kind=edges_by_kind,
            dynamic_edges=sum(1 for e in self.graph.edges if e.dynamic),
            circular_dependencies=len(self.find_cycles()),
            parse_errors=len(self.graph.errors),
            most_imported=[item for item in imported[:top] if item[1] > 0],
            most_importing=[item for item in importing[:top] if item[1] > 0],
        )

    def explain_impact(self, node_id: str, seeds: Iterable[str],
                       include_dynamic: bool = True) -> Optional[List[str]]:
        """Shortest import chain from ``node_id`` down to the nearest seed.

        The chain starts at the impacted node and ends at a seed, following
        import direction. Returns None when no seed is reachable.
        """
        if node_id not in self.digraph:
            return None
        digraph = self.digraph
        if not include_dynamic:
            digraph = nx.subgraph_view(
                self.digraph, filter_edge=lambda u, v: not self.digraph.edges[u, v]['dynamic']
            )

        lengths, paths = nx.single_source_dijkstra(digraph, node_id)
        best = None
        for seed in sorted(seeds):
            if seed == node_id or seed not in paths:
                continue
            if best is None or lengths[seed] < lengths[best]:
                best = seed
        return paths[best] if best is not None else None
