"""Tests for configuration loading."""

import pytest

from browse_stats.config import (
    AppConfig,
    ConfigurationError,
    load_config,
    load_environment_config,
    parse_app_config,
)
from browse_stats.config.duration import (
    DurationParseError,
    format_seconds,
    parse_duration,
    validate_duration_range,
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no config-related environment."""
    for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_defaults_when_no_file_exists(self, clean_env):
        app_config, env_config = load_config()

        assert app_config.facets.employer_limit == 20
        assert app_config.facets.query_timeout_seconds == 10
        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"
        assert app_config.api.port == 8000
        assert env_config.database_url == "sqlite:///./data/listings.db"

    def test_load_explicit_file(self, clean_env):
        config_file = clean_env / "custom.yaml"
        config_file.write_text(
            """
facets:
  employer_limit: 10
  query_timeout: PT30S
logging:
  level: DEBUG
  format: json
api:
  host: 0.0.0.0
  port: 9000
"""
        )

        with pytest.warns(UserWarning, match="every interface"):
            app_config, _ = load_config(config_file)

        assert app_config.facets.employer_limit == 10
        assert app_config.facets.query_timeout_seconds == 30
        assert app_config.logging.format == "json"
        assert app_config.api.port == 9000

    def test_config_yaml_in_cwd_is_found(self, clean_env):
        (clean_env / "config.yaml").write_text("facets:\n  employer_limit: 7\n")
        app_config, _ = load_config()
        assert app_config.facets.employer_limit == 7

    def test_config_directory_fallback(self, clean_env):
        (clean_env / "config").mkdir()
        (clean_env / "config" / "config.yaml").write_text("facets:\n  employer_limit: 8\n")
        app_config, _ = load_config()
        assert app_config.facets.employer_limit == 8

    def test_empty_file_uses_defaults(self, clean_env):
        (clean_env / "config.yaml").write_text("")
        app_config, _ = load_config()
        assert app_config == AppConfig()

    def test_missing_explicit_file(self, clean_env):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(clean_env / "missing.yaml")

    def test_invalid_yaml(self, clean_env):
        (clean_env / "config.yaml").write_text("facets: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config()

    def test_top_level_must_be_mapping(self, clean_env):
        (clean_env / "config.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config()

    def test_integer_query_timeout_means_seconds(self):
        app_config = parse_app_config({"facets": {"query_timeout": 15}})
        assert app_config.facets.query_timeout == "15s"
        assert app_config.facets.query_timeout_seconds == 15


class TestValidation:
    """Validation errors are collected into ConfigurationError."""

    @pytest.mark.parametrize("limit", [0, 101, -5])
    def test_employer_limit_range(self, limit):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"facets": {"employer_limit": limit}})
        assert any("employer_limit" in error for error in exc_info.value.errors)

    @pytest.mark.parametrize("timeout", ["0s", "10m", "soon", "PT0S"])
    def test_query_timeout_range(self, timeout):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"facets": {"query_timeout": timeout}})
        assert any("query_timeout" in error for error in exc_info.value.errors)

    def test_invalid_log_format(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"logging": {"format": "xml"}})
        assert "logging -> format" in str(exc_info.value)

    def test_multiple_errors_reported_together(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_app_config({"facets": {"employer_limit": 0}, "api": {"port": 70000}})
        assert len(exc_info.value.errors) == 2
        assert "Suggestions:" in str(exc_info.value)

    def test_large_employer_limit_warns(self, clean_env):
        (clean_env / "config.yaml").write_text("facets:\n  employer_limit: 80\n")
        with pytest.warns(UserWarning, match="Large employer_limit"):
            load_config()

    def test_unknown_section_warns(self, clean_env):
        (clean_env / "config.yaml").write_text("sources: []\n")
        with pytest.warns(UserWarning, match="Unknown configuration sections"):
            load_config()


class TestEnvironment:
    """Environment variable loading."""

    def test_environment_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "staging")

        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:///other.db"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"

    def test_invalid_log_level(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError, match="Invalid LOG_LEVEL"):
            load_environment_config()

    def test_empty_database_url(self, clean_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "  ")
        with pytest.raises(ConfigurationError, match="DATABASE_URL"):
            load_environment_config()


class TestDuration:
    """Duration parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("10s", 10), ("2m", 120), ("1m30s", 90), ("1h", 3600), ("PT10S", 10), ("PT1M30S", 90), ("pt2m", 120), (" 5 s", 5)],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "10", "10x", "P2D", "PT", "0s", "abc10s"])
    def test_parse_duration_invalid(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_validate_duration_range(self):
        validate_duration_range(10, min_seconds=1, max_seconds=300)
        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(301, min_seconds=1, max_seconds=300, label="Query timeout")

    def test_format_seconds(self):
        assert format_seconds(1) == "1 second"
        assert format_seconds(45) == "45 seconds"
        assert format_seconds(300) == "5 minutes"
        assert format_seconds(90) == "90 seconds"
