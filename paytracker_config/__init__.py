"""
paytracker_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration -- YAML-driven.  Sits above ``paytracker_kernel`` and
    below ``paytracker_services``.  The kernel and engines MUST NEVER import
    from ``paytracker_config``; services receive a ``PayTrackerConfig``.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ConfigError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PAYTRACKER_CONFIG_TRACE`` log entry with the source path and the
    checksum of the effective configuration.
"""

from __future__ import annotations

import os
from pathlib import Path

from paytracker_config.loader import compute_checksum, load_yaml_file, parse_config
from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"

CONFIG_ENV_VAR = "PAYTRACKER_CONFIG"


def get_active_config(path: Path | str | None = None) -> PayTrackerConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``path``, then the ``PAYTRACKER_CONFIG``
    environment variable, then the packaged ``defaults.yaml``.  A selected
    file is layered over the packaged defaults, so it only needs to name
    the keys it changes.

    Returns:
        A frozen, validated ``PayTrackerConfig``.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None

    config = parse_config(load_yaml_file(DEFAULTS_FILE))
    source = DEFAULTS_FILE
    if path is not None:
        source = Path(path)
        config = parse_config(load_yaml_file(source), base=config)

    _logger.info(
        "PAYTRACKER_CONFIG_TRACE",
        extra={
            "trace_type": "PAYTRACKER_CONFIG_TRACE",
            "source": str(source),
            "checksum": compute_checksum(config),
            "overdue_threshold_days": config.overdue_threshold_days,
            "persistent": config.database_url is not None,
        },
    )
    return config


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULTS_FILE",
    "PayTrackerConfig",
    "get_active_config",
]
