"""Dependency graph data model and snapshot persistence."""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..exceptions import SnapshotError

logger = logging.getLogger(__name__)

PKG_PREFIX = "pkg:"

CODE_EXTENSIONS = ['.ts', '.tsx', '.js', '.jsx', '.mjs', '.cjs', '.vue']
STYLE_EXTENSIONS = ['.css', '.scss', '.less']
ASSET_EXTENSIONS = ['.svg', '.png', '.jpg', '.jpeg', '.gif', '.webp', '.avif', '.mp4', '.json']

SNAPSHOT_DIR = ".code-impact"
SNAPSHOT_FILE = "graph.txt"


class NodeType:
    """Node categories, derived from the node id."""
    CODE = "code"
    STYLE = "style"
    ASSET = "asset"
    PKG = "pkg"


class EdgeKind:
    """Edge categories."""
    IMPORT = "import"
    DYNAMIC = "dynamic"
    STYLE = "style"
    ASSET = "asset"
    PKG = "pkg"


def detect_node_type(node_id: str) -> str:
    """Classify a node id as pkg, style, asset or code."""
    if node_id.startswith(PKG_PREFIX):
        return NodeType.PKG
    ext = os.path.splitext(node_id)[1].lower()
    if ext in STYLE_EXTENSIONS:
        return NodeType.STYLE
    if ext in ASSET_EXTENSIONS:
        return NodeType.ASSET
    return NodeType.CODE


def is_package_id(node_id: str) -> bool:
    return node_id.startswith(PKG_PREFIX)


def normalize_path(path: Union[str, Path]) -> str:
    """Absolute, normalized filesystem spelling of a path."""
    return os.path.normpath(os.path.abspath(str(path)))


def canonical_id(node_id: str, project_root: Union[str, Path]) -> str:
    """Convert an absolute path into a project-relative POSIX id.

    Package ids are returned untouched. Paths outside the project root keep
    their absolute spelling, in POSIX form.
    """
    if is_package_id(node_id):
        return node_id
    root = normalize_path(project_root)
    absolute = normalize_path(node_id)
    if absolute == root:
        return "."
    if absolute.startswith(root.rstrip(os.sep) + os.sep):
        return Path(os.path.relpath(absolute, root)).as_posix()
    return Path(absolute).as_posix()


@dataclass
class Node:
    """A graph vertex: a source file, stylesheet, asset or package reference."""
    id: str
    type: str

    @classmethod
    def for_id(cls, node_id: str) -> 'Node':
        return cls(id=node_id, type=detect_node_type(node_id))

    def to_dict(self) -> Dict:
        return {'id': self.id, 'type': self.type}


@dataclass
class Edge:
    """A dependency from ``source`` (the dependent) to ``target``."""
    source: str
    target: str
    kind: str
    dynamic: bool = False

    def to_dict(self) -> Dict:
        return {'from': self.source, 'to': self.target, 'kind': self.kind, 'dynamic': self.dynamic}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Edge':
        return cls(
            source=data['from'],
            target=data['to'],
            kind=data.get('kind', EdgeKind.IMPORT),
            dynamic=bool(data.get('dynamic', False))
        )


@dataclass
class GraphMeta:
    """Snapshot metadata."""
    project_root: str
    generated_at: str = ""

    def __post_init__(self):
        if not self.generated_at:
            self.generated_at = datetime.now(timezone.utc).isoformat()


@dataclass
class GraphError:
    """A per-file problem recorded during a build."""
    file: str
    error: str

    def to_dict(self) -> Dict:
        return {'file': self.file, 'error': self.error}


def derive_reverse(edges: List[Edge]) -> Dict[str, List[Dict]]:
    """Build the reverse adjacency index from an edge list."""
    reverse: Dict[str, List[Dict]] = {}
    for edge in edges:
        reverse.setdefault(edge.target, []).append(
            {'from': edge.source, 'kind': edge.kind, 'dynamic': edge.dynamic}
        )
    return reverse


def derive_forward(edges: List[Edge]) -> Dict[str, List[Dict]]:
    """Build the forward adjacency index from an edge list."""
    forward: Dict[str, List[Dict]] = {}
    for edge in edges:
        forward.setdefault(edge.source, []).append(
            {'to': edge.target, 'kind': edge.kind, 'dynamic': edge.dynamic}
        )
    return forward


@dataclass
class Graph:
    """Complete dependency graph of a project.

    ``forward`` and ``reverse`` are kept as exact transposes of ``edges``.
    ``reverse`` is ``None`` only for snapshots written before the reverse
    index existed; traversal derives it from ``edges`` in that case.
    """
    meta: GraphMeta
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    forward: Dict[str, List[Dict]] = field(default_factory=dict)
    reverse: Optional[Dict[str, List[Dict]]] = field(default_factory=dict)
    errors: List[GraphError] = field(default_factory=list)

    def add_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            node = Node.for_id(node_id)
            self.nodes[node_id] = node
        return node

    def add_edge(self, source: str, target: str, kind: str, dynamic: bool = False) -> Edge:
        """Append an edge and register it in both adjacency indices."""
        edge = Edge(source=source, target=target, kind=kind, dynamic=dynamic)
        self.edges.append(edge)
        self.forward.setdefault(source, []).append({'to': target, 'kind': kind, 'dynamic': dynamic})
        if self.reverse is None:
            self.reverse = derive_reverse(self.edges[:-1])
        self.reverse.setdefault(target, []).append({'from': source, 'kind': kind, 'dynamic': dynamic})
        return edge

    def add_error(self, file: str, error: str) -> None:
        self.errors.append(GraphError(file=file, error=error))

    def reverse_index(self) -> Dict[str, List[Dict]]:
        """Reverse adjacency, derived from ``edges`` when the snapshot lacks one."""
        if self.reverse is None:
            return derive_reverse(self.edges)
        return self.reverse

    def relativize(self) -> 'Graph':
        """Return a copy whose ids are project-relative POSIX paths."""
        root = self.meta.project_root
        remap = {node_id: canonical_id(node_id, root) for node_id in self.nodes}

        def convert(node_id: str) -> str:
            return remap.get(node_id) or canonical_id(node_id, root)

        graph = Graph(meta=self.meta)
        for node_id in self.nodes:
            graph.add_node(convert(node_id))
        for edge in self.edges:
            graph.add_edge(convert(edge.source), convert(edge.target), edge.kind, edge.dynamic)
        for err in self.errors:
            graph.add_error(convert(err.file) if err.file else err.file, err.error)
        return graph

    def to_dict(self) -> Dict:
        data = {
            'meta': {'projectRoot': self.meta.project_root, 'generatedAt': self.meta.generated_at},
            'nodes': {node_id: node.to_dict() for node_id, node in self.nodes.items()},
            'edges': [edge.to_dict() for edge in self.edges],
            'forward': self.forward,
            'reverse': self.reverse,
            'errors': [err.to_dict() for err in self.errors],
        }
        if self.reverse is None:
            del data['reverse']
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Graph':
        """Rebuild a graph from snapshot data.

        Edges missing an endpoint are dropped and both adjacency indices are
        derived again from the remaining edges. A ``reverse`` index is only
        present when the snapshot had one. Malformed structure raises
        :class:`SnapshotError`.
        """
        meta = data.get('meta') or {}
        nodes = data.get('nodes') or {}
        edges = data.get('edges') or []
        errors = data.get('errors') or []
        if not isinstance(meta, dict) or not isinstance(nodes, dict):
            raise SnapshotError("snapshot 'meta' and 'nodes' must be objects")
        if not isinstance(edges, list) or not isinstance(errors, list):
            raise SnapshotError("snapshot 'edges' and 'errors' must be arrays")

        graph = cls(
            meta=GraphMeta(
                project_root=meta.get('projectRoot', ''),
                generated_at=meta.get('generatedAt', '')
            )
        )
        for node_id, node in nodes.items():
            node_type = node.get('type') if isinstance(node, dict) else None
            graph.nodes[node_id] = Node(id=node_id, type=node_type or detect_node_type(node_id))

        graph.edges = [
            Edge.from_dict(e) for e in edges
            if isinstance(e, dict) and e.get('from') and e.get('to')
        ]
        for edge in graph.edges:
            graph.add_node(edge.source)
            graph.add_node(edge.target)
        graph.forward = derive_forward(graph.edges)
        graph.reverse = derive_reverse(graph.edges) if isinstance(data.get('reverse'), dict) else None
        graph.errors = [
            GraphError(file=e.get('file', ''), error=e.get('error', ''))
            for e in errors if isinstance(e, dict)
        ]
        return graph


def snapshot_path(project_root: Union[str, Path]) -> Path:
    return Path(project_root) / SNAPSHOT_DIR / SNAPSHOT_FILE


def save_graph(graph: Graph, project_root: Union[str, Path]) -> Path:
    """Write the graph snapshot, overwriting any previous one."""
    path = snapshot_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(graph.to_dict(), indent=2, ensure_ascii=False), encoding='utf-8')
    logger.info("Saved graph snapshot with %d nodes and %d edges to %s",
                len(graph.nodes), len(graph.edges), path)
    return path


def load_graph(project_root: Union[str, Path]) -> Graph:
    """Load the graph snapshot written by :func:`save_graph`."""
    path = snapshot_path(project_root)
    try:
        raw = path.read_text(encoding='utf-8')
    except OSError as exc:
        raise SnapshotError(f"No graph snapshot at {path}; build the graph first") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Graph snapshot {path} is corrupt: {exc}") from exc
    if not isinstance(data, dict):
        raise SnapshotError(f"Graph snapshot {path} is corrupt: expected a JSON object")
    try:
        return Graph.from_dict(data)
    except SnapshotError as exc:
        raise SnapshotError(f"Graph snapshot {path} is corrupt: {exc}") from exc
