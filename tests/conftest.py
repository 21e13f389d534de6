"""Pytest configuration and fixtures for code-impact tests."""

from pathlib import Path
from typing import Callable, Dict

import pytest

from code_impact.core.graph import Graph, GraphMeta


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write a dict of relative path -> content under a temporary project root."""

    def _make(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def graph_factory() -> Callable[..., Graph]:
    """Build an in-memory graph from (from, to, kind, dynamic) tuples."""

    def _build(edges=(), nodes=(), project_root="/proj") -> Graph:
        graph = Graph(meta=GraphMeta(project_root=project_root))
        for node_id in nodes:
            graph.add_node(node_id)
        for edge in edges:
            source, target, kind = edge[:3]
            dynamic = edge[3] if len(edge) > 3 else False
            graph.add_node(source)
            graph.add_node(target)
            graph.add_edge(source, target, kind, dynamic)
        return graph

    return _build


@pytest.fixture
def sample_frontend() -> Dict[str, str]:
    """A small project touching every extractor."""
    return {
        "src/main.ts": (
            "import { createApp } from 'vue'\n"
            "import App from './App.vue'\n"
            "import './styles/global.css'\n"
            "createApp(App).mount('#app')\n"
        ),
        "src/App.vue": (
            "<template><Header /></template>\n"
            "<script setup lang=\"ts\">\n"
            "import Header from './components/Header'\n"
            "const Settings = () => import('./views/Settings.vue')\n"
            "</script>\n"
            "<style scoped>\n"
            ".app { background: url(./assets/bg.png) }\n"
            "</style>\n"
        ),
        "src/components/Header/index.tsx": (
            "import { format } from '../../utils/format'\n"
            "export const Header = () => <h1>{format('x')}</h1>\n"
        ),
        "src/views/Settings.vue": (
            "<script>\n"
            "const format = require('../utils/format')\n"
            "export default { name: 'Settings' }\n"
            "</script>\n"
        ),
        "src/utils/format.js": "module.exports = function format(s) { return s }\n",
        "src/utils/unused.js": "export const unused = 1\n",
        "src/styles/global.css": "@import './reset.css';\nbody { background: url('../assets/bg.png') }\n",
        "src/styles/reset.css": "* { margin: 0 }\n",
        "src/assets/bg.png": "not really a png",
    }
