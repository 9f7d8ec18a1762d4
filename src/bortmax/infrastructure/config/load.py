"""Layered configuration loading.

Precedence, lowest first: built-in defaults, YAML file, environment
(``BORTMAX_*``, optionally seeded from a ``.env`` file), CLI overrides.
Every layer is brought into the sectioned YAML shape before merging, and
the merged result is validated once by :class:`AppConfig`.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_TOP_LEVEL_KEYS: frozenset[str] = frozenset({"app_name", "environment"})
_SECTIONS: frozenset[str] = frozenset(
    {"upstream", "http", "logging", "catalog", "stremio"}
)

# Flat env/CLI key -> (section, key inside section)
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "upstream_base_url": ("upstream", "base_url"),
    "upstream_movie_path": ("upstream", "movie_path"),
    "upstream_series_path": ("upstream", "series_path"),
    "http_timeout_seconds": ("http", "timeout_seconds"),
    "http_follow_redirects": ("http", "follow_redirects"),
    "http_user_agent": ("http", "user_agent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
    "catalog_ttl_seconds": ("catalog", "ttl_seconds"),
    "catalog_max_items": ("catalog", "max_items"),
    "catalog_poster_url": ("catalog", "poster_url"),
}


def _merge_into(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Merge *layer* into *target* in place; nested mappings merge key by key."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = deepcopy(value)


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a layer into sectioned shape, accepting flat keys as well.

    Unknown keys are dropped; ``AppConfig`` never sees them.
    """
    out: dict[str, Any] = {k: layer[k] for k in _TOP_LEVEL_KEYS if k in layer}

    for section in _SECTIONS:
        block = layer.get(section)
        if isinstance(block, Mapping):
            out[section] = dict(block)

    for flat_key, (section, key) in _FLAT_KEYS.items():
        if flat_key in layer:
            out.setdefault(section, {})[key] = layer[flat_key]
    return out


def _yaml_layer(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def _env_layer(dotenv_path: Path | None) -> dict[str, Any]:
    # .env values only fill variables that are not already set.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)
    return EnvOverrides().to_update_dict()


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated application config from all layers.

    Raises:
        FileNotFoundError: an explicitly given YAML or .env file is missing.
        ValueError: the YAML document is not a mapping.
        pydantic.ValidationError: the merged values are invalid.

    Only reads files; never creates any.
    """
    layers: list[Mapping[str, Any]] = [DEFAULT_CONFIG]
    if config_path is not None:
        layers.append(_yaml_layer(config_path))
    layers.append(_env_layer(dotenv_path))
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, _sectioned(layer))

    return AppConfig.model_validate(merged)
