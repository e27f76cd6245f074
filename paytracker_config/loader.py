"""
Configuration Loader (``paytracker_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into a frozen
``PayTrackerConfig``.  Callers outside this package use
``paytracker_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key or invalid value  -> ``ConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.exceptions import ConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level must be a mapping")
    return data


def parse_config(data: dict[str, Any], base: PayTrackerConfig | None = None) -> PayTrackerConfig:
    """
    Build a ``PayTrackerConfig`` from a parsed mapping layered over ``base``.

    Raises:
        ConfigError: on unknown keys or invalid values.
    """
    unknown = sorted(set(data) - PayTrackerConfig.field_names())
    if unknown:
        raise ConfigError(unknown[0], "unknown configuration key")
    values = {**_as_dict(base or PayTrackerConfig()), **data}
    if isinstance(values.get("log_level"), str):
        values["log_level"] = values["log_level"].upper()
    return PayTrackerConfig(**values)


def compute_checksum(config: PayTrackerConfig) -> str:
    """Deterministic SHA-256 of the effective configuration."""
    canonical = json.dumps(_as_dict(config), sort_keys=True)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _as_dict(config: PayTrackerConfig) -> dict[str, Any]:
    return {name: getattr(config, name) for name in sorted(PayTrackerConfig.field_names())}
