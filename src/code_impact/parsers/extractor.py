"""Dispatches a file to the extractor for its kind."""

import os
from typing import List

from ..core.graph import STYLE_EXTENSIONS
from ..exceptions import ParseError
from .css_parser import CssParser
from .tree_sitter_parser import (
    LANGUAGE_BY_EXTENSION, LANGUAGE_BY_LANG_ATTR, RawDependency, TreeSitterParser
)
from .vue_parser import parse_sfc


class DependencyExtractor:
    """Extracts raw dependency specifiers from script, Vue and stylesheet files.

    Files of any other kind (images, json, ...) have no outgoing dependencies.
    A parse failure raises :class:`ParseError`; callers decide how to record it.
    """

    def __init__(self):
        self.scripts = TreeSitterParser()
        self.styles = CssParser()

    def extract(self, file_path: str, content: str) -> List[RawDependency]:
        ext = os.path.splitext(file_path)[1].lower()
        if ext == '.vue':
            return self.extract_vue(content)
        if ext in LANGUAGE_BY_EXTENSION:
            return self.extract_script(content, LANGUAGE_BY_EXTENSION[ext])
        if ext in STYLE_EXTENSIONS:
            return self.extract_style(content)
        return []

    def extract_script(self, content: str, language: str) -> List[RawDependency]:
        try:
            return self.scripts.get_dependencies(content, language)
        except ParseError as exc:
            raise ParseError(f"parse failed: {exc}") from exc

    def extract_style(self, content: str) -> List[RawDependency]:
        return self.styles.get_dependencies(content)

    def extract_vue(self, content: str) -> List[RawDependency]:
        descriptor = parse_sfc(content)
        deps: List[RawDependency] = []

        for block in descriptor.scripts:
            if block.src:
                deps.append(RawDependency(block.src, 'import', line=block.start_line))
            if block.content.strip():
                language = LANGUAGE_BY_LANG_ATTR.get(block.lang, 'javascript')
                try:
                    deps.extend(self.scripts.get_dependencies(block.content, language))
                except ParseError as exc:
                    raise ParseError(f"parse vue <script> failed: {exc}") from exc

        for block in descriptor.styles:
            if block.src:
                deps.append(RawDependency(block.src, 'style', line=block.start_line))
            if block.content.strip():
                deps.extend(self.styles.get_dependencies(block.content))

        return deps
