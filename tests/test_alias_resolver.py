"""Tests for loading resolution settings from a bundler config."""

import json

import pytest

from code_impact.analyzers import load_resolve_config
from code_impact.analyzers.alias_resolver import DEFAULT_EXTENSIONS


def test_defaults_without_config(tmp_path):
    config = load_resolve_config(tmp_path)
    assert config.alias == {}
    assert config.extensions == DEFAULT_EXTENSIONS


def test_json_config(make_project):
    project = make_project({
        "webpack.config.json": json.dumps({
            "resolve": {
                "alias": {"@": "src", "broken": {"name": "x"}},
                "extensions": [".vue", ".js"],
            }
        })
    })

    config = load_resolve_config(project, "webpack.config.json")

    assert config.alias == {"@": "src"}
    assert config.extensions == [".vue", ".js"]


def test_json_multi_config_uses_first_with_resolve(make_project):
    project = make_project({
        "webpack.config.json": json.dumps([
            {"entry": "./a.js"},
            {"resolve": {"alias": {"~": "lib"}}},
        ])
    })

    config = load_resolve_config(project, "webpack.config.json")

    assert config.alias == {"~": "lib"}
    assert config.extensions == DEFAULT_EXTENSIONS


def test_malformed_config_falls_back(make_project):
    project = make_project({"webpack.config.json": "{ not json"})
    config = load_resolve_config(project, "webpack.config.json")
    assert config.alias == {}
    assert config.extensions == DEFAULT_EXTENSIONS


@pytest.mark.parametrize("content", ['"oops"', "42", "null", '{"resolve": "src"}', '[1, 2]'])
def test_non_object_config_falls_back(make_project, content):
    project = make_project({"webpack.config.json": content})

    config = load_resolve_config(project, "webpack.config.json")

    assert config.alias == {}
    assert config.extensions == DEFAULT_EXTENSIONS


def test_missing_explicit_config_falls_back(tmp_path):
    assert load_resolve_config(tmp_path, "configs/webpack.prod.js").alias == {}


def test_missing_node_binary_falls_back(make_project, monkeypatch):
    project = make_project({"webpack.config.js": "module.exports = { resolve: { alias: { '@': 'src' } } }"})
    monkeypatch.setattr("code_impact.analyzers.alias_resolver.shutil.which", lambda name: None)

    config = load_resolve_config(project)

    assert config.alias == {}
    assert config.extensions == DEFAULT_EXTENSIONS
