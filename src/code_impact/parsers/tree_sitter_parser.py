"""Tree-sitter based dependency extraction for JavaScript and TypeScript."""

import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Callable
from tree_sitter import Tree, Node  # Only need these for type hints
from tree_sitter_languages import get_parser  # Pre-built grammars

from ..exceptions import ParseError

logger = logging.getLogger(__name__)

# File extension -> grammar name
LANGUAGE_BY_EXTENSION = {
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.mjs': 'javascript',
    '.cjs': 'javascript',
    '.ts': 'typescript',
    '.tsx': 'tsx',
}

# Vue <script lang="..."> -> grammar name
LANGUAGE_BY_LANG_ATTR = {
    'js': 'javascript',
    'jsx': 'javascript',
    'ts': 'typescript',
    'tsx': 'tsx',
}


@dataclass
class RawDependency:
    """A dependency specifier as written in source, before resolution."""
    specifier: str
    kind: str  # import, dynamic, style, asset
    dynamic: bool = False
    line: Optional[int] = None


def _string_value(node: Optional[Node]) -> Optional[str]:
    """Value of a plain string literal node, or None for anything else."""
    if node is None or node.type != 'string':
        return None
    text = node.text.decode('utf8')
    if len(text) < 2:
        return None
    return text[1:-1]


class TreeSitterParser:
    """Parser using Tree-sitter to find statically resolvable module references."""

    def __init__(self):
        """Initialize parsers for the supported grammars."""
        self.parsers: Dict[str, Any] = {}
        for lang in ['javascript', 'typescript', 'tsx']:
            try:
                self.parsers[lang] = get_parser(lang)
            except (ValueError, TypeError, RuntimeError) as e:
                logger.warning("Failed to initialize %s support: %s", lang, e)

        # Node kinds that can carry a dependency; everything else is only walked
        self._handlers: Dict[str, Callable[[Node], Optional[RawDependency]]] = {
            'import_statement': self._visit_import,
            'export_statement': self._visit_export,
            'call_expression': self._visit_call,
        }

    def parse_file(self, content: str, language: str) -> Tree:
        """Parse file content using appropriate language grammar."""
        if language not in self.parsers:
            raise ParseError(f"Language {language} not supported")

        tree = self.parsers[language].parse(bytes(content, 'utf8'))
        if tree.root_node.has_error:
            # Grammar lag on newer syntax; well-formed statements are still usable
            logger.debug("Syntax error at line %d, extracting from the rest of the tree",
                         self._first_error_line(tree.root_node))
        return tree

    def get_dependencies(self, content: str, language: str) -> List[RawDependency]:
        """Extract import/export/require/import() dependencies from source text.

        Syntax errors are tolerated unless they make a dependency unreadable:
        an ERROR region holding an import or require, or a malformed dependency
        form whose specifier cannot be read. Those raise :class:`ParseError`.
        """
        tree = self.parse_file(content, language)
        deps = []

        # Explicit stack keeps document order without recursion limits
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == 'ERROR' and self._hides_dependency(node):
                raise ParseError(f"syntax error at line {node.start_point[0] + 1}")
            handler = self._handlers.get(node.type)
            if handler:
                dep = handler(node)
                if dep:
                    deps.append(dep)
                elif node.has_error and self._is_dependency_form(node):
                    raise ParseError(f"syntax error at line {node.start_point[0] + 1}")
            stack.extend(reversed(node.children))

        return deps

    def _visit_import(self, node: Node) -> Optional[RawDependency]:
        # import x from 'y' / import 'y'
        spec = _string_value(node.child_by_field_name('source'))
        if spec is None:
            return None
        return RawDependency(spec, 'import', line=node.start_point[0] + 1)

    def _visit_export(self, node: Node) -> Optional[RawDependency]:
        # Only re-export-all forms: export * from 'y' / export * as ns from 'y'
        spec = _string_value(node.child_by_field_name('source'))
        if spec is None:
            return None
        if not any(child.type in ('*', 'namespace_export') for child in node.children):
            return None
        return RawDependency(spec, 'import', line=node.start_point[0] + 1)

    def _visit_call(self, node: Node) -> Optional[RawDependency]:
        function_node = node.child_by_field_name('function')
        arguments = node.child_by_field_name('arguments')
        if function_node is None or arguments is None:
            return None

        args = [child for child in arguments.named_children if child.type != 'comment']
        if function_node.type == 'import':
            # import('y')
            spec = _string_value(args[0]) if args else None
            if spec is None:
                return None
            return RawDependency(spec, 'dynamic', dynamic=True, line=node.start_point[0] + 1)

        if function_node.type == 'identifier' and function_node.text == b'require':
            if len(args) != 1:
                return None
            spec = _string_value(args[0])
            if spec is None:
                return None
            return RawDependency(spec, 'import', line=node.start_point[0] + 1)

        return None

    def _first_error_line(self, root: Node) -> int:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == 'ERROR' or node.is_missing:
                return node.start_point[0] + 1
            if node.has_error:
                stack.extend(reversed(node.children))
        return root.start_point[0] + 1

    def _is_dependency_form(self, node: Node) -> bool:
        # Forms whose handler always yields a dependency when well-formed
        if node.type == 'import_statement':
            return True
        if node.type == 'export_statement':
            return any(child.type in ('*', 'namespace_export') for child in node.children)
        function_node = node.child_by_field_name('function')
        if function_node is None:
            return False
        return function_node.type == 'import' or (
            function_node.type == 'identifier' and function_node.text == b'require'
        )

    def _hides_dependency(self, error_node: Node) -> bool:
        """True if an ERROR region swallowed an import keyword or a require call."""
        stack = list(error_node.children)
        while stack:
            node = stack.pop()
            if node.type in self._handlers and not node.has_error:
                # Intact statements inside the region are extracted by the main walk
                continue
            if node.type == 'import':
                return True
            if node.type == 'identifier' and node.text == b'require':
                return True
            if node.type == 'export' and any(s.type == '*' for s in node.parent.children):
                return True
            stack.extend(node.children)
        return False
