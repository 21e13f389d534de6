"""Source file discovery."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..core.graph import ASSET_EXTENSIONS, CODE_EXTENSIONS, SNAPSHOT_DIR, STYLE_EXTENSIONS, normalize_path
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = frozenset(CODE_EXTENSIONS + STYLE_EXTENSIONS + ASSET_EXTENSIONS)

IGNORED_DIRECTORIES = frozenset([
    'node_modules', 'dist', '.git', '.next', '.cache', 'coverage', 'build', SNAPSHOT_DIR,
])


def resolve_roots(project_root: Union[str, Path], roots: Optional[Sequence[str]] = None) -> List[str]:
    """Return the absolute source directories to scan.

    Explicit ``roots`` are taken relative to the project root; missing ones are
    skipped. Without explicit roots, ``src`` and every ``packages/*/src`` are used.
    """
    base = Path(project_root)
    found = []
    if roots:
        candidates = [base / r for r in roots]
    else:
        candidates = [base / 'src']
        packages = base / 'packages'
        if packages.is_dir():
            candidates.extend(sorted(p / 'src' for p in packages.iterdir() if p.name not in IGNORED_DIRECTORIES))

    for candidate in candidates:
        if candidate.is_dir():
            path = normalize_path(candidate)
            if path not in found:
                found.append(path)
        elif roots:
            logger.warning("Source root %s does not exist, skipping", candidate)

    if not found:
        raise ConfigurationError(
            f"No usable source directory under {base}; pass explicit roots or add a src/ directory"
        )
    return found


def discover_files(project_root: Union[str, Path], roots: Optional[Sequence[str]] = None) -> List[str]:
    """Enumerate analyzable files under the source roots (sorted, absolute, unique)."""
    files = set()
    for root in resolve_roots(project_root, roots):
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRECTORIES]
            for name in filenames:
                if os.path.splitext(name)[1].lower() in SOURCE_EXTENSIONS:
                    files.add(normalize_path(os.path.join(dirpath, name)))

    logger.debug("Discovered %d files", len(files))
    return sorted(files)
