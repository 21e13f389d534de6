"""Tests for source root resolution and file discovery."""

import os

import pytest

from code_impact.analyzers import discover_files, resolve_roots
from code_impact.exceptions import ConfigurationError


def rel(project, files):
    return [os.path.relpath(f, project).replace(os.sep, "/") for f in files]


def test_default_src_root(make_project):
    project = make_project({
        "src/a.ts": "",
        "src/b/c.vue": "",
        "src/styles/x.scss": "",
        "src/img/logo.svg": "",
        "src/readme.md": "",
        "other/d.ts": "",
    })

    assert rel(project, discover_files(project)) == [
        "src/a.ts", "src/b/c.vue", "src/img/logo.svg", "src/styles/x.scss",
    ]


def test_monorepo_package_roots(make_project):
    project = make_project({
        "packages/ui/src/Button.tsx": "",
        "packages/core/src/index.ts": "",
        "packages/docs/README.md": "",
    })

    roots = resolve_roots(project)

    assert rel(project, roots) == ["packages/core/src", "packages/ui/src"]
    assert rel(project, discover_files(project)) == [
        "packages/core/src/index.ts", "packages/ui/src/Button.tsx",
    ]


def test_ignored_directories_are_pruned(make_project):
    project = make_project({
        "src/a.js": "",
        "src/node_modules/lib/index.js": "",
        "src/dist/bundle.js": "",
        "src/.code-impact/graph.js": "",
    })

    assert rel(project, discover_files(project)) == ["src/a.js"]


def test_explicit_roots(make_project):
    project = make_project({"app/main.js": "", "lib/util.js": "", "src/ignored.js": ""})

    files = discover_files(project, ["app", "lib", "missing"])

    assert rel(project, files) == ["app/main.js", "lib/util.js"]


def test_no_usable_root(tmp_path):
    with pytest.raises(ConfigurationError):
        resolve_roots(tmp_path)
    with pytest.raises(ConfigurationError):
        discover_files(tmp_path, ["nowhere"])
