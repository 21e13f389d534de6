"""CLI tests using click's test runner."""

import json

import pytest
from click.testing import CliRunner

from code_impact.analyzers import ImpactResult, ImpactedNode
from code_impact.cli import _filter_targets, cli, to_mermaid
from code_impact.core.graph import Edge, snapshot_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(make_project, sample_frontend):
    return make_project(sample_frontend)


@pytest.fixture
def built(runner, project):
    result = runner.invoke(cli, ["build-graph", "--project-root", str(project), "--no-summary"])
    assert result.exit_code == 0, result.output
    return project


class TestBuildGraph:

    def test_writes_snapshot(self, runner, project):
        result = runner.invoke(cli, ["build-graph", "--project-root", str(project)])

        assert result.exit_code == 0, result.output
        assert snapshot_path(project).is_file()
        assert "Dependency graph written" in result.output
        assert "Dependency graph" in result.output

    def test_missing_source_root_aborts(self, runner, tmp_path):
        result = runner.invoke(cli, ["build-graph", "--project-root", str(tmp_path)])

        assert result.exit_code == 1
        assert "Build failed" in result.output


class TestImpact:

    def test_json_output(self, runner, built):
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", "src/utils/format.js", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["seeds"] == ["src/utils/format.js"]
        assert [(r["id"], r["distance"]) for r in data["results"]] == [
            ("src/components/Header/index.tsx", 1),
            ("src/views/Settings.vue", 1),
            ("src/App.vue", 2),
            ("src/main.ts", 3),
        ]

    def test_depth_and_dynamic_flags(self, runner, built):
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", "src/views/Settings.vue",
            "--format", "json", "--include-dynamic", "--depth", "1",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [r["id"] for r in data["results"]] == ["src/App.vue"]
        assert data["edges"][0]["dynamic"] is True

    def test_mermaid_output_to_file(self, runner, built, tmp_path):
        out = tmp_path / "impact.mmd"
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", "src/assets/bg.png",
            "--format", "mermaid", "--output", str(out),
        ])

        assert result.exit_code == 0, result.output
        text = out.read_text(encoding="utf-8")
        assert text.startswith("graph LR")
        assert '["src/styles/global.css"]' in text

    def test_table_with_explain(self, runner, built):
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", "src/utils/format.js", "--explain",
        ])

        assert result.exit_code == 0, result.output
        assert "Impacted files" in result.output

    def test_relative_project_root(self, runner, make_project, monkeypatch):
        base = make_project({"app/src/a.js": "export const a = 1\n", "app/src/b.js": "import './a.js'\n"})
        monkeypatch.chdir(base)
        built = runner.invoke(cli, ["build-graph", "--project-root", "app", "--no-summary"])
        assert built.exit_code == 0, built.output

        result = runner.invoke(cli, [
            "impact", "--project-root", "app", "--files", "src/a.js", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["seeds"] == ["src/a.js"]
        assert [r["id"] for r in data["results"]] == ["src/b.js"]

    def test_snapshot_used_after_project_moves(self, runner, make_project):
        base = make_project({"app/src/a.js": "export const a = 1\n", "app/src/b.js": "import './a.js'\n"})
        assert runner.invoke(cli, ["build-graph", "--project-root", str(base / "app")]).exit_code == 0
        moved = (base / "app").rename(base / "moved")

        result = runner.invoke(cli, [
            "impact", "--project-root", str(moved), "--files", str(moved / "src" / "a.js"), "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        assert [r["id"] for r in json.loads(result.stdout)["results"]] == ["src/b.js"]

    def test_only_tool_output_changed(self, runner, built):
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", ".code-impact/graph.txt",
        ])

        assert result.exit_code == 0
        assert "No changed files left" in result.output

    def test_without_snapshot(self, runner, project):
        result = runner.invoke(cli, ["impact", "--project-root", str(project), "--files", "src/main.ts"])

        assert result.exit_code == 1
        assert "Analysis failed" in result.output

    def test_negative_depth_is_a_usage_error(self, runner, built):
        result = runner.invoke(cli, [
            "impact", "--project-root", str(built), "--files", "src/main.ts", "--depth", "-1",
        ])
        assert result.exit_code == 2


class TestOtherCommands:

    def test_summary_json(self, runner, built):
        result = runner.invoke(cli, ["summary", "--project-root", str(built), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["total_nodes"] == 10
        assert data["total_edges"] == 10
        assert data["dynamic_edges"] == 1

    def test_summary_without_snapshot(self, runner, project):
        result = runner.invoke(cli, ["summary", "--project-root", str(project)])
        assert result.exit_code == 1

    def test_changed_lines_outside_git(self, runner, tmp_path_factory):
        plain = tmp_path_factory.mktemp("plain")

        result = runner.invoke(cli, ["changed-lines", "--project-root", str(plain)])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {}


def test_filter_targets():
    assert _filter_targets([
        "/p/src/a.js", "/p/.code-impact/graph.txt", ".code-impact/x", "/p/impact.mmd",
    ]) == ["/p/src/a.js"]


def test_to_mermaid():
    result = ImpactResult(
        seeds={"src/a.js"},
        results=[ImpactedNode(id="src/b.js", distance=1, type="code")],
        edges=[Edge(source="src/b.js", target="src/a.js", kind="dynamic", dynamic=True)],
    )

    assert to_mermaid(result).splitlines() == [
        "graph LR",
        '  n0["src/a.js"]',
        '  n1["src/b.js"]',
        "  n1 -->|dynamic| n0",
        "  classDef seed fill:#ffd166,stroke:#d49b00,stroke-width:1.5px;",
        "  classDef impact fill:#ef476f,color:#fff;",
        "  class n0 seed;",
        "  class n1 impact;",
    ]
