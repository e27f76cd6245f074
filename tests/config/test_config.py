"""
Tests for configuration loading.

Covers:
- Packaged defaults
- Partial override files layered over the defaults
- Environment variable selection
- Rejection of unknown keys and invalid values
- Config trace emission
"""

import pytest

from paytracker_config import CONFIG_ENV_VAR, DEFAULTS_FILE, get_active_config
from paytracker_config.loader import compute_checksum, load_yaml_file, parse_config
from paytracker_config.schema import PayTrackerConfig
from paytracker_kernel.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestDefaults:

    def test_packaged_defaults_match_schema(self):
        assert get_active_config() == PayTrackerConfig()

    def test_defaults_file_is_complete(self):
        assert set(load_yaml_file(DEFAULTS_FILE)) == PayTrackerConfig.field_names()

    def test_default_values(self):
        config = get_active_config()
        assert config.overdue_threshold_days == 30
        assert config.database_url is None
        assert config.backup_filename_prefix == "paytracker-backup"


class TestOverrides:

    def test_partial_file_layered_over_defaults(self, tmp_path):
        path = tmp_path / "ledger.yaml"
        path.write_text("overdue_threshold_days: 45\nlog_level: debug\n")

        config = get_active_config(path)

        assert config.overdue_threshold_days == 45
        assert config.log_level == "DEBUG"
        assert config.backup_filename_prefix == "paytracker-backup"

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("database_url: sqlite:///ledger.db\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert get_active_config().database_url == "sqlite:///ledger.db"

    def test_explicit_path_wins_over_environment(self, tmp_path, monkeypatch):
        env_path = tmp_path / "env.yaml"
        env_path.write_text("overdue_threshold_days: 1\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("overdue_threshold_days: 2\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_path))

        assert get_active_config(explicit).overdue_threshold_days == 2

    def test_empty_file_means_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert get_active_config(path) == PayTrackerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "missing.yaml")


class TestValidation:

    def test_unknown_key(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"overdue_days": 10})
        assert exc_info.value.key == "overdue_days"

    def test_currency_is_not_a_setting(self):
        with pytest.raises(ConfigError) as exc_info:
            parse_config({"currency": "USD"})
        assert exc_info.value.key == "currency"

    @pytest.mark.parametrize(
        "data",
        [
            {"overdue_threshold_days": -1},
            {"overdue_threshold_days": "30"},
            {"overdue_threshold_days": True},
            {"backup_filename_prefix": ""},
            {"log_level": "LOUD"},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ConfigError):
            parse_config(data)

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_yaml_file(path)


class TestConfigTrace:

    def test_checksum_is_stable(self):
        assert compute_checksum(PayTrackerConfig()) == compute_checksum(PayTrackerConfig())
        assert compute_checksum(PayTrackerConfig()) != compute_checksum(
            PayTrackerConfig(overdue_threshold_days=31)
        )

    def test_trace_logged(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "PAYTRACKER_CONFIG_TRACE"]
        assert traces[0]["checksum"] == compute_checksum(config)
        assert traces[0]["persistent"] is False
