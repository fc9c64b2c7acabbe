"""Load UndovizConfig from undoviz.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from dataclasses import fields
from pathlib import Path

import yaml

from undoviz._errors import ConfigError
from undoviz.config import UndovizConfig

CONFIG_NAMES = ("undoviz.yaml", "undoviz.yml", "undoviz.toml")
_KNOWN_KEYS = frozenset(f.name for f in fields(UndovizConfig))


def load_config(root: Path, **overrides: object) -> UndovizConfig:
    """Load UndovizConfig from root, optionally merging undoviz.yaml.

    Looks for undoviz.yaml, undoviz.yml, or undoviz.toml in root. If found,
    loads and merges with overrides. Overrides take precedence; ``None``
    overrides are ignored so unset CLI flags don't mask file values.

    Raises:
        ConfigError: The file cannot be parsed or names unknown keys.

    """
    file_config = _read_undoviz_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    unknown = sorted(set(merged) - _KNOWN_KEYS)
    if unknown:
        msg = f"unknown config keys: {', '.join(unknown)}"
        raise ConfigError(msg)
    return UndovizConfig(**merged)  # type: ignore[arg-type]


def config_file(root: Path) -> Path | None:
    """Return the config file undoviz would read from root, if any."""
    for name in CONFIG_NAMES:
        path = root / name
        if path.is_file():
            return path
    return None


def _read_undoviz_config(root: Path) -> dict[str, object]:
    """Read undoviz config from yaml/toml if present. Returns empty dict otherwise."""
    path = config_file(root)
    if path is None:
        return {}
    if path.suffix == ".toml":
        return _parse_toml(path)
    return _parse_yaml(path)


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"cannot read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_undoviz_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text())
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"cannot read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_undoviz_section(data)


def _flatten_undoviz_section(data: dict[str, object]) -> dict[str, object]:
    """Extract undoviz.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("undoviz")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "undoviz":
            result[k] = v
    return result
