"""Dependency extraction for scripts, Vue components and stylesheets."""

from .tree_sitter_parser import TreeSitterParser, RawDependency
from .css_parser import CssParser
from .vue_parser import parse_sfc, SfcBlock, SfcDescriptor
from .extractor import DependencyExtractor

__all__ = [
    "TreeSitterParser", "RawDependency", "CssParser",
    "parse_sfc", "SfcBlock", "SfcDescriptor", "DependencyExtractor",
]
