"""Resolves import specifiers to canonical graph node ids."""

import os
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..core.graph import PKG_PREFIX, normalize_path
from .alias_resolver import ResolveConfig


def probe(base_path: str, extensions: List[str]) -> Optional[str]:
    """Find the file a module base path refers to.

    Tries the exact path, then each extension appended, then ``index`` plus
    each extension inside the directory.
    """
    if os.path.isfile(base_path):
        return normalize_path(base_path)
    for ext in extensions:
        candidate = base_path + ext
        if os.path.isfile(candidate):
            return normalize_path(candidate)
    if os.path.isdir(base_path):
        for ext in extensions:
            candidate = os.path.join(base_path, 'index' + ext)
            if os.path.isfile(candidate):
                return normalize_path(candidate)
    return None


class SpecifierResolver:
    """Turns a raw specifier into an absolute file path or a ``pkg:`` id.

    Resolution strategies are tried in order until one returns a target:
    relative/root-absolute paths, then aliases (longest key first), then the
    external package fallback, which always succeeds.
    """

    def __init__(self, project_root: Union[str, Path], config: Optional[ResolveConfig] = None):
        self.project_root = normalize_path(project_root)
        self.config = config or ResolveConfig()
        self.alias_keys = sorted(self.config.alias, key=len, reverse=True)
        self.strategies: List[Callable[[str, str], Optional[str]]] = [
            self.resolve_path,
            self.resolve_alias,
            self.resolve_package,
        ]

    def resolve(self, specifier: str, origin_file: str) -> str:
        # The package strategy is last and never returns None
        target = None
        for strategy in self.strategies:
            target = strategy(specifier, origin_file)
            if target is not None:
                break
        return target

    def resolve_path(self, specifier: str, origin_file: str) -> Optional[str]:
        # './x', '../x', '/x'; a miss falls through to aliases and packages
        if specifier.startswith('/'):
            base = os.path.join(self.project_root, specifier.lstrip('/'))
        elif specifier.startswith('.'):
            base = os.path.join(os.path.dirname(origin_file), specifier)
        else:
            return None
        return probe(os.path.normpath(base), self.config.extensions)

    def resolve_alias(self, specifier: str, origin_file: str) -> Optional[str]:
        for key in self.alias_keys:
            if key.endswith('$'):
                # webpack exact-match alias
                if specifier != key[:-1]:
                    continue
                rest = ''
            elif specifier == key or specifier.startswith(key + '/'):
                rest = specifier[len(key):].lstrip('/')
            else:
                continue

            target = os.path.join(self.project_root, self.config.alias[key])
            base = os.path.join(target, rest) if rest else target
            resolved = probe(os.path.normpath(base), self.config.extensions)
            if resolved:
                return resolved
        return None

    def resolve_package(self, specifier: str, origin_file: str) -> str:
        return PKG_PREFIX + specifier
