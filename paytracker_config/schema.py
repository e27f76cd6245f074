"""
Configuration Schema (``paytracker_config.schema``).

Frozen dataclass describing every tunable of the ledger.  Defaults mirror
``defaults.yaml``; a loaded file only needs to name the values it changes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from paytracker_kernel.exceptions import ConfigError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class PayTrackerConfig:
    """
    Runtime configuration of the ledger.

    Guarantees:
        - ``overdue_threshold_days`` >= 0.
        - ``log_level`` is a stdlib logging level name.
    """

    overdue_threshold_days: int = 30
    backup_filename_prefix: str = "paytracker-backup"
    database_url: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not isinstance(self.overdue_threshold_days, int) or isinstance(
            self.overdue_threshold_days, bool
        ):
            raise ConfigError("overdue_threshold_days", "must be an integer")
        if self.overdue_threshold_days < 0:
            raise ConfigError("overdue_threshold_days", "cannot be negative")
        if not isinstance(self.backup_filename_prefix, str) or not self.backup_filename_prefix:
            raise ConfigError("backup_filename_prefix", "cannot be empty")
        if self.database_url is not None and not isinstance(self.database_url, str):
            raise ConfigError("database_url", "must be a string")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError("log_level", f"must be one of {sorted(_LOG_LEVELS)}")

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))
