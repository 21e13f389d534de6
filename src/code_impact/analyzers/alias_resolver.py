"""Loads module resolution settings (alias map, extensions) from a webpack config."""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ['.ts', '.tsx', '.js', '.jsx', '.mjs', '.cjs', '.json', '.css', '.scss', '.less']

CONFIG_CANDIDATES = ['webpack.config.js', 'webpack.config.cjs', 'webpack.config.mjs']

NODE_TIMEOUT_SECONDS = 30

# Imports the config module and prints its `resolve` section as JSON.
# argv[1] is a file:// URL so that ESM and CommonJS configs both load.
_NODE_LOADER = """
const url = process.argv[1];
import(url).then((mod) => {
    const config = (mod && mod.default !== undefined) ? mod.default : mod;
    const resolve = Array.isArray(config)
        ? ((config.find((c) => c && c.resolve) || {}).resolve)
        : (config && config.resolve);
    process.stdout.write(JSON.stringify(resolve || {}));
}).catch((err) => {
    process.stderr.write(String(err && err.stack || err));
    process.exit(1);
});
"""


@dataclass
class ResolveConfig:
    """Module resolution settings used by the specifier resolver."""
    alias: Dict[str, str] = field(default_factory=dict)
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))


def _find_config(project_root: Path, bundler_config: Optional[Union[str, Path]]) -> Optional[Path]:
    if bundler_config:
        candidate = project_root / bundler_config
        return candidate if candidate.is_file() else None
    for name in CONFIG_CANDIDATES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def _run_node(config_path: Path) -> Dict:
    node = shutil.which('node')
    if node is None:
        raise OSError("node executable not found")
    result = subprocess.run(
        [node, '--input-type=commonjs', '-e', _NODE_LOADER, config_path.resolve().as_uri()],
        cwd=str(config_path.parent),
        capture_output=True,
        text=True,
        encoding='utf-8',
        timeout=NODE_TIMEOUT_SECONDS,
        check=True
    )
    return json.loads(result.stdout or '{}')


def _read_resolve_section(config_path: Path) -> Dict:
    if config_path.suffix.lower() == '.json':
        data = json.loads(config_path.read_text(encoding='utf-8'))
        if isinstance(data, list):
            data = next((c for c in data if isinstance(c, dict) and c.get('resolve')), {})
        if not isinstance(data, dict):
            return {}
        return data.get('resolve') or {}
    return _run_node(config_path)


def _clean_alias(raw) -> Dict[str, str]:
    alias = {}
    if not isinstance(raw, dict):
        return alias
    for key, target in raw.items():
        if isinstance(target, str) and target:
            alias[key] = target
        else:
            logger.debug("Ignoring alias %r with unsupported target %r", key, target)
    return alias


def load_resolve_config(project_root: Union[str, Path],
                        bundler_config: Optional[Union[str, Path]] = None) -> ResolveConfig:
    """Load ``resolve.alias`` and ``resolve.extensions`` from a bundler config.

    Any problem (no config, no node binary, evaluation error, malformed
    output) falls back to the defaults; this never raises.
    """
    root = Path(project_root)
    config_path = _find_config(root, bundler_config)
    if config_path is None:
        logger.debug("No bundler config found under %s, using default resolution", root)
        return ResolveConfig()

    try:
        resolve = _read_resolve_section(config_path)
    except (OSError, ValueError, subprocess.SubprocessError) as exc:
        logger.debug("Could not load %s: %s", config_path, exc)
        return ResolveConfig()

    if not isinstance(resolve, dict):
        return ResolveConfig()

    extensions = resolve.get('extensions')
    if not isinstance(extensions, list) or not extensions:
        extensions = list(DEFAULT_EXTENSIONS)
    else:
        extensions = [ext for ext in extensions if isinstance(ext, str)] or list(DEFAULT_EXTENSIONS)

    config = ResolveConfig(alias=_clean_alias(resolve.get('alias')), extensions=extensions)
    logger.info("Loaded %d aliases and %d extensions from %s",
                len(config.alias), len(config.extensions), config_path.name)
    return config
