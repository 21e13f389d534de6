"""Changed files and changed line ranges from git."""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import git

from .graph import canonical_id, normalize_path

logger = logging.getLogger(__name__)

DEFAULT_RANGE = 'HEAD~1..HEAD'

# @@ -<old>[,<count>] +<newStart>[,<newCount>] @@
HUNK_PATTERN = re.compile(r'^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@')

GIT_ERRORS = (git.exc.GitError, OSError, ValueError)


@dataclass
class LineRange:
    """1-indexed inclusive line range in the new version of a file."""
    start: int
    end: int

    def to_dict(self) -> Dict:
        return {'start': self.start, 'end': self.end}


ChangedRanges = Dict[str, List[LineRange]]


def parse_unified_diff(diff_text: str, key_fn: Callable[[str], str] = lambda p: p) -> ChangedRanges:
    """Collect new-side hunk ranges per file from unified diff text.

    A ``+++`` line opens a file section (``/dev/null`` closes it); hunks outside
    a section are ignored. ``key_fn`` maps the diff's path to the result key.
    """
    ranges: ChangedRanges = {}
    current = None

    for line in diff_text.splitlines():
        if line.startswith('diff --git'):
            current = None
            continue
        if line.startswith('+++ '):
            path = line[4:].strip().split('\t')[0]
            if path == '/dev/null':
                current = None
                continue
            if path.startswith('b/'):
                path = path[2:]
            current = key_fn(path)
            ranges.setdefault(current, [])
            continue
        match = HUNK_PATTERN.match(line)
        if match and current is not None:
            start = int(match.group(1))
            count = int(match.group(2)) if match.group(2) is not None else 1
            ranges[current].append(LineRange(start=start, end=start + count - 1))

    return {path: hunks for path, hunks in ranges.items() if hunks}


class GitChangeSet:
    """Queries a git repository for what changed.

    Every git failure (not a repository, bad revision range, git missing)
    is logged and produces an empty result.
    """

    def __init__(self, project_root: Union[str, Path]):
        self.project_root = normalize_path(project_root)
        self._repo: Optional[git.Repo] = None

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            self._repo = git.Repo(self.project_root, search_parent_directories=True)
        return self._repo

    @property
    def work_tree(self) -> str:
        return normalize_path(self.repo.working_tree_dir)

    def changed_files(self, revision_range: str = DEFAULT_RANGE) -> List[str]:
        """Absolute paths of files changed in ``revision_range``."""
        try:
            output = self.repo.git.diff('--name-only', revision_range)
            work_tree = self.work_tree
        except GIT_ERRORS as e:
            logger.debug("git diff --name-only %s failed: %s", revision_range, e)
            return []

        return [
            normalize_path(os.path.join(work_tree, line.strip()))
            for line in output.splitlines()
            if line.strip()
        ]

    def changed_ranges(self, revision_range: str = DEFAULT_RANGE,
                       files: Sequence[Union[str, Path]] = ()) -> ChangedRanges:
        """Changed line ranges per project-relative file id.

        Tries, in order: the range restricted to ``files``, the range without
        path restriction, and the working tree restricted to ``files``. The
        first non-empty result wins.
        """
        try:
            pathspecs = self._pathspecs(files)
        except GIT_ERRORS as e:
            logger.debug("Cannot open git repository at %s: %s", self.project_root, e)
            return {}

        strategies = [
            [revision_range, '--'] + pathspecs if pathspecs else [revision_range],
            [revision_range],
            ['--'] + pathspecs if pathspecs else [],
        ]
        for args in strategies:
            ranges = parse_unified_diff(self._diff(args), self._key)
            if ranges:
                return ranges
        return {}

    def _diff(self, args: List[str]) -> str:
        try:
            return self.repo.git.diff(
                '--no-color', '--unified=0', '--src-prefix=a/', '--dst-prefix=b/', *args
            )
        except GIT_ERRORS as e:
            logger.debug("git diff %s failed: %s", ' '.join(args), e)
            return ''

    def _pathspecs(self, files: Sequence[Union[str, Path]]) -> List[str]:
        # Paths git understands: relative to the work tree, inside it
        work_tree = self.work_tree
        specs = []
        for f in files:
            path = str(f)
            absolute = normalize_path(path if os.path.isabs(path) else os.path.join(self.project_root, path))
            rel = os.path.relpath(absolute, work_tree)
            if rel != '.' and not rel.startswith('..'):
                specs.append(Path(rel).as_posix())
        return specs

    def _key(self, diff_path: str) -> str:
        return canonical_id(os.path.join(self.work_tree, diff_path), self.project_root)


def get_changed_files(project_root: Union[str, Path], revision_range: str = DEFAULT_RANGE) -> List[str]:
    return GitChangeSet(project_root).changed_files(revision_range)


def get_changed_ranges(project_root: Union[str, Path], revision_range: str = DEFAULT_RANGE,
                       files: Sequence[Union[str, Path]] = ()) -> ChangedRanges:
    return GitChangeSet(project_root).changed_ranges(revision_range, files)
