"""Tests for unified diff parsing and git change sets."""

from pathlib import Path

import git
import pytest

from code_impact.core.diff_parser import (
    GitChangeSet, LineRange, get_changed_files, get_changed_ranges, parse_unified_diff
)
from code_impact.core.graph import normalize_path


class TestParseUnifiedDiff:

    def test_pure_insertion(self):
        diff = (
            "diff --git a/src/a.js b/src/a.js\n"
            "--- a/src/a.js\n"
            "+++ b/src/a.js\n"
            "@@ -10,0 +11,3 @@\n"
            "+x\n+y\n+z\n"
        )
        assert parse_unified_diff(diff) == {"src/a.js": [LineRange(11, 13)]}

    def test_count_defaults_to_one(self):
        diff = "+++ b/src/a.js\n@@ -4 +4 @@\n-old\n+new\n@@ -9,2 +9 @@ function f() {\n"
        assert parse_unified_diff(diff) == {"src/a.js": [LineRange(4, 4), LineRange(9, 9)]}

    def test_multiple_files_and_deletions(self):
        diff = (
            "diff --git a/src/gone.js b/src/gone.js\n"
            "deleted file mode 100644\n"
            "--- a/src/gone.js\n"
            "+++ /dev/null\n"
            "@@ -1,3 +0,0 @@\n"
            "diff --git a/src/b.css b/src/b.css\n"
            "--- a/src/b.css\n"
            "+++ b/src/b.css\n"
            "@@ -1,2 +1,2 @@\n"
            "diff --git a/src/c.js b/src/c.js\n"
            "--- a/src/c.js\n"
            "+++ b/src/c.js\n"
            "@@ -5,1 +5,0 @@\n"
        )
        assert parse_unified_diff(diff) == {
            "src/b.css": [LineRange(1, 2)],
            "src/c.js": [LineRange(5, 4)],
        }

    def test_hunks_outside_a_file_section_are_ignored(self):
        assert parse_unified_diff("@@ -1 +1 @@\n") == {}

    def test_file_without_hunks_is_omitted(self):
        diff = "diff --git a/x.png b/x.png\n--- a/x.png\n+++ b/x.png\nBinary files differ\n"
        assert parse_unified_diff(diff) == {}

    def test_key_function(self):
        diff = "+++ b/web/src/a.js\n@@ -1 +1 @@\n"
        assert parse_unified_diff(diff, lambda p: p.upper()) == {"WEB/SRC/A.JS": [LineRange(1, 1)]}

    def test_line_range_dict(self):
        assert LineRange(3, 7).to_dict() == {"start": 3, "end": 7}


def write(root, files):
    for rel, content in files.items():
        path = Path(root) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def commit(repo, files, message):
    write(repo.working_tree_dir, files)
    repo.git.add("--all")
    repo.git.commit("-m", message)


@pytest.fixture
def repo(tmp_path):
    repo = git.Repo.init(tmp_path)
    with repo.config_writer() as config:
        config.set_value("user", "name", "Test User")
        config.set_value("user", "email", "test@example.com")
        config.set_value("commit", "gpgsign", "false")
    commit(repo, {"a.txt": "1\n2\n3\n", "other.txt": "keep\n"}, "initial")
    commit(repo, {"a.txt": "1\nX\n3\n4\n5\n"}, "edit a")
    return repo


class TestGitChangeSet:

    def test_changed_files_are_absolute(self, repo, tmp_path):
        assert get_changed_files(tmp_path) == [normalize_path(tmp_path / "a.txt")]

    def test_changed_ranges(self, repo, tmp_path):
        ranges = get_changed_ranges(tmp_path, "HEAD~1..HEAD", ["a.txt"])
        assert ranges == {"a.txt": [LineRange(2, 2), LineRange(4, 5)]}

    def test_scoped_miss_falls_back_to_whole_range(self, repo, tmp_path):
        ranges = get_changed_ranges(tmp_path, "HEAD~1..HEAD", ["other.txt"])
        assert list(ranges) == ["a.txt"]

    def test_bad_range_falls_back_to_working_tree(self, repo, tmp_path):
        write(tmp_path, {"other.txt": "keep\nmore\n"})

        ranges = get_changed_ranges(tmp_path, "no-such-rev..HEAD", [tmp_path / "other.txt"])

        assert ranges == {"other.txt": [LineRange(2, 2)]}

    def test_bad_range_without_files(self, repo, tmp_path):
        assert get_changed_files(tmp_path, "no-such-rev..HEAD") == []
        assert get_changed_ranges(tmp_path, "no-such-rev..HEAD") == {}

    def test_project_in_subdirectory(self, repo, tmp_path):
        commit(repo, {"web/src/app.js": "a\n"}, "add web")
        commit(repo, {"web/src/app.js": "a\nb\n"}, "edit web")
        project = tmp_path / "web"

        change_set = GitChangeSet(project)

        assert change_set.changed_files() == [normalize_path(project / "src" / "app.js")]
        assert change_set.changed_ranges(files=["src/app.js"]) == {"src/app.js": [LineRange(2, 2)]}

    def test_not_a_repository(self, tmp_path_factory):
        plain = tmp_path_factory.mktemp("plain")
        assert get_changed_files(plain) == []
        assert get_changed_ranges(plain, files=["a.js"]) == {}
