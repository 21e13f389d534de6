"""Stylesheet dependency extraction (css, scss, less) using tinycss2."""

import logging
from typing import List, Optional, Iterable

import tinycss2

from .tree_sitter_parser import RawDependency

logger = logging.getLogger(__name__)


def _url_value(token) -> Optional[str]:
    """Return the target of a url(...) token, or None if it is not one."""
    if token.type == 'url':
        return token.value.strip()
    if token.type == 'function' and token.lower_name == 'url':
        for arg in token.arguments:
            if arg.type in ('string', 'ident'):
                return arg.value.strip()
        return ''
    return None


def _import_value(token) -> Optional[str]:
    """Target of one @import prelude token: a string or a url."""
    if token.type == 'string':
        return token.value.strip()
    return _url_value(token)


def _children(token) -> Iterable:
    """Nested component values of a token, if any."""
    if token.type in ('() block', '[] block', '{} block'):
        return token.content
    if token.type == 'function':
        return token.arguments
    return ()


class CssParser:
    """Finds @import and url() references in a stylesheet.

    tinycss2 never rejects input: unknown syntax (scss nesting, less mixins)
    degrades into generic blocks that are still walked for url() values.
    """

    def get_dependencies(self, content: str) -> List[RawDependency]:
        deps: List[RawDependency] = []
        rules = tinycss2.parse_stylesheet(content, skip_comments=True, skip_whitespace=True)

        for rule in rules:
            if rule.type == 'at-rule' and rule.lower_at_keyword == 'import':
                deps.extend(self._import_targets(rule))
            elif rule.type in ('at-rule', 'qualified-rule') and rule.content:
                self._collect_urls(rule.content, deps)

        return deps

    def _import_targets(self, rule) -> List[RawDependency]:
        # @import 'a.css'; @import url(b.css) screen; @import 'c', 'd';  (scss)
        targets = []
        for token in rule.prelude:
            spec = _import_value(token)
            if spec:
                targets.append(RawDependency(spec, 'style', line=token.source_line))
        return targets

    def _collect_urls(self, tokens, deps: List[RawDependency]) -> None:
        # Block contents are raw tokens, so a nested @import is an at-keyword
        # followed by its targets up to ';' or a block
        importing = False
        for token in tokens:
            if token.type == 'at-keyword' and token.lower_value == 'import':
                importing = True
                continue
            if importing:
                if token.type == '{} block' or (token.type == 'literal' and token.value == ';'):
                    importing = False
                else:
                    spec = _import_value(token)
                    if spec:
                        deps.append(RawDependency(spec, 'style', line=token.source_line))
                    continue

            spec = _url_value(token)
            if spec is None:
                self._collect_urls(_children(token), deps)
            elif spec and not spec.lower().startswith('data:'):
                deps.append(RawDependency(spec, 'asset', line=token.source_line))
