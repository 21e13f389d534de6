"""Import Graph Builder - Builds the project dependency graph from source files."""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..core.graph import (
    CODE_EXTENSIONS, STYLE_EXTENSIONS, EdgeKind, Graph, GraphMeta, is_package_id, normalize_path
)
from ..exceptions import ParseError
from ..parsers.extractor import DependencyExtractor
from .alias_resolver import load_resolve_config
from .file_discovery import discover_files
from .specifier_resolver import SpecifierResolver

logger = logging.getLogger(__name__)

# Script dependency kinds that turn into 'pkg' edges when the target is external
SCRIPT_KINDS = (EdgeKind.IMPORT, EdgeKind.DYNAMIC)

PARSED_EXTENSIONS = frozenset(CODE_EXTENSIONS + STYLE_EXTENSIONS)


@dataclass
class BuildOptions:
    """Configuration for a graph build."""
    roots: Optional[Sequence[str]] = None
    bundler_config: Optional[str] = None
    max_workers: Optional[int] = None


@dataclass
class FileResult:
    """Resolved dependencies of one file, produced by a worker."""
    file_path: str
    dependencies: List[Tuple[str, str, bool]] = field(default_factory=list)  # (target, kind, dynamic)
    error: Optional[str] = None


class ImportGraphBuilder:
    """Builds a dependency graph of a front-end project.

    Extraction and resolution of each file is independent and runs in a
    thread pool; nodes and edges are registered on the calling thread, in
    sorted file order, so repeated builds produce identical graphs.
    """

    def __init__(self, project_root: Union[str, Path], options: Optional[BuildOptions] = None):
        self.project_root = normalize_path(project_root)
        self.options = options or BuildOptions()
        self.max_workers = self.options.max_workers or os.cpu_count() or 4
        self._local = threading.local()

    def build_graph(self) -> Graph:
        """Build the complete graph; ids are project-relative in the result."""
        config = load_resolve_config(self.project_root, self.options.bundler_config)
        files = discover_files(self.project_root, self.options.roots)
        resolver = SpecifierResolver(self.project_root, config)

        graph = Graph(meta=GraphMeta(project_root=self.project_root))
        # Every discovered file is a node, even with no edges or a parse failure
        for file_path in files:
            graph.add_node(file_path)

        logger.info("Analyzing %d files under %s", len(files), self.project_root)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            results = executor.map(lambda f: self._process_file(f, resolver), files)
            for result in results:
                self._register(graph, result)

        graph = graph.relativize()
        logger.info("Built graph: %d nodes, %d edges, %d errors",
                    len(graph.nodes), len(graph.edges), len(graph.errors))
        return graph

    def _process_file(self, file_path: str, resolver: SpecifierResolver) -> FileResult:
        result = FileResult(file_path=file_path)
        if os.path.splitext(file_path)[1].lower() not in PARSED_EXTENSIONS:
            # Images, json and other assets have no outgoing dependencies
            return result
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            result.error = str(e)
            return result

        # Each worker thread gets its own extractor; tree-sitter parsers are not shared
        try:
            deps = self._extractor().extract(file_path, content)
        except ParseError as e:
            result.error = str(e)
            return result

        for dep in deps:
            target = resolver.resolve(dep.specifier, file_path)
            kind = dep.kind
            if is_package_id(target) and kind in SCRIPT_KINDS:
                kind = EdgeKind.PKG
            result.dependencies.append((target, kind, dep.dynamic))
        return result

    def _extractor(self) -> DependencyExtractor:
        if not hasattr(self._local, 'extractor'):
            self._local.extractor = DependencyExtractor()
        return self._local.extractor

    def _register(self, graph: Graph, result: FileResult) -> None:
        if result.error is not None:
            logger.warning("%s: %s", result.file_path, result.error)
            graph.add_error(result.file_path, result.error)
            return
        logger.debug("%s: %d dependencies", result.file_path, len(result.dependencies))
        for target, kind, dynamic in result.dependencies:
            graph.add_node(target)
            graph.add_edge(result.file_path, target, kind, dynamic)


def build_graph(project_root: Union[str, Path], roots: Optional[Sequence[str]] = None,
                bundler_config: Optional[str] = None, max_workers: Optional[int] = None) -> Graph:
    """Build the dependency graph of the project at ``project_root``."""
    options = BuildOptions(roots=roots, bundler_config=bundler_config, max_workers=max_workers)
    return ImportGraphBuilder(project_root, options).build_graph()
