"""Load AutorouteConfig from autoroute.yaml / autoroute.toml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import yaml

from autoroute.config import AutorouteConfig

logger = logging.getLogger("autoroute.config")

_KNOWN_KEYS = frozenset({"ext", "enable_standalone", "host", "port", "debug"})


def load_config(root: str | Path, **overrides: object) -> AutorouteConfig:
    """Load AutorouteConfig for *root*, optionally merging a config file.

    Looks for autoroute.yaml, autoroute.yml, or autoroute.toml in root.
    ``None`` overrides are dropped so CLI defaults never mask file values.
    """
    root = Path(root)
    file_config = _read_config_file(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    return AutorouteConfig(root=root, **merged)


def _read_config_file(root: Path) -> dict[str, object]:
    """Read config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("autoroute.yaml", "autoroute.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "autoroute.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    return _flatten_section(data)


def _flatten_section(data: dict[str, object]) -> dict[str, object]:
    """Extract autoroute.* keys and known top-level keys into one dict."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("autoroute")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result
