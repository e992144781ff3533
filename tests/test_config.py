"""Unit tests for config loading and overrides."""

from pathlib import Path
from typing import Any, Dict

import pytest

from query_profiler.config import (
    ProfilerSettings,
    build_target,
    deep_get,
    get_env_var,
    load_config,
    read_settings,
)


class TestDeepGet:
    """Tests for deep_get helper function."""

    def test_nested_keys(self) -> None:
        """Test nested key access."""
        d = {"a": {"b": {"c": 3}}}
        assert deep_get(d, ["a", "b", "c"]) == 3

    def test_missing_key_returns_default(self) -> None:
        """Test missing key returns default value."""
        d = {"a": 1}
        assert deep_get(d, ["b"]) is None
        assert deep_get(d, ["a", "x"], "default") == "default"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        """Test loading a valid YAML config."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("database:\n  host: localhost\nprofiler:\n  warm_up_runs: 5\n")
        cfg = load_config(config_file)
        assert cfg["database"]["host"] == "localhost"
        assert cfg["profiler"]["warm_up_runs"] == 5

    def test_load_missing_config_raises(self, tmp_path: Path) -> None:
        """Test loading missing config raises SystemExit."""
        with pytest.raises(SystemExit, match="config not found"):
            load_config(tmp_path / "nonexistent.yml")

    def test_load_empty_config_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test empty config returns empty dict."""
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert load_config(config_file) == {}


class TestGetEnvVar:
    """Tests for get_env_var function."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test returns value when env var is set."""
        monkeypatch.setenv("QUERY_PROFILER_HOST", "db.internal")
        assert get_env_var("host") == "db.internal"

    def test_returns_none_when_not_set_or_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unset and empty env vars are ignored."""
        monkeypatch.delenv("QUERY_PROFILER_NONEXISTENT_FIELD", raising=False)
        monkeypatch.setenv("QUERY_PROFILER_USER", "")
        assert get_env_var("nonexistent_field") is None
        assert get_env_var("user") is None


class TestBuildTarget:
    """Tests for build_target function."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("HOST", "PORT", "USER", "PASSWORD", "DATABASE", "CHARSET"):
            monkeypatch.delenv(f"QUERY_PROFILER_{name}", raising=False)

    @pytest.fixture
    def valid_config(self) -> Dict[str, Any]:
        """Return a valid configuration dictionary."""
        return {
            "database": {
                "host": "localhost",
                "port": 3307,
                "user": "profiler",
                "password": "pw",
                "database": "shop",
            }
        }

    def test_build_target_from_config(self, valid_config: Dict[str, Any]) -> None:
        """Test building target from config only."""
        target = build_target(valid_config, {})
        assert target.host == "localhost"
        assert target.port == 3307
        assert target.user == "profiler"
        assert target.password == "pw"
        assert target.database == "shop"
        assert target.charset == "utf8mb4"

    def test_defaults_for_optional_fields(self) -> None:
        """Test port, password and charset fall back to defaults."""
        cfg = {"database": {"host": "h", "user": "u", "database": "d"}}
        target = build_target(cfg, {})
        assert target.port == 3306
        assert target.password == ""

    def test_build_target_with_overrides(self, valid_config: Dict[str, Any]) -> None:
        """Test CLI overrides replace config values."""
        target = build_target(valid_config, {"host": "replica", "port": "3310", "user": None})
        assert target.host == "replica"
        assert target.port == 3310
        assert target.user == "profiler"

    def test_env_vars_take_precedence(self, valid_config: Dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variables win over CLI and config."""
        monkeypatch.setenv("QUERY_PROFILER_HOST", "env-host")
        monkeypatch.setenv("QUERY_PROFILER_PASSWORD", "env-pw")
        target = build_target(valid_config, {"host": "cli-host"})
        assert target.host == "env-host"
        assert target.password == "env-pw"

    def test_missing_field_raises(self) -> None:
        """Test missing required field raises SystemExit with a helpful message."""
        cfg = {"database": {"host": "h", "user": "u"}}
        with pytest.raises(SystemExit) as exc_info:
            build_target(cfg, {})
        error_msg = str(exc_info.value)
        assert "missing database.database" in error_msg
        assert "QUERY_PROFILER_DATABASE" in error_msg
        assert "--database" in error_msg

    def test_bad_port_raises(self, valid_config: Dict[str, Any]) -> None:
        """Test a non-numeric port raises SystemExit."""
        with pytest.raises(SystemExit, match="port"):
            build_target(valid_config, {"port": "abc"})


class TestReadSettings:
    """Tests for read_settings and ProfilerSettings."""

    def test_defaults(self) -> None:
        """Test an empty config gives the default settings."""
        settings = read_settings({})
        assert settings == ProfilerSettings(warm_up_runs=3, max_execution_time=600, allowed_ips=())

    def test_from_config(self) -> None:
        """Test settings loaded from the profiler section."""
        cfg = {"profiler": {"warm_up_runs": 1, "max_execution_time": 30, "allowed_ips": ["10.0.0.1"]}}
        settings = read_settings(cfg)
        assert settings.warm_up_runs == 1
        assert settings.max_execution_time == 30
        assert settings.allowed_ips == ("10.0.0.1",)

    def test_cli_warm_up_runs_override(self) -> None:
        """Test the CLI warm-up count wins over the config."""
        assert read_settings({"profiler": {"warm_up_runs": 5}}, warm_up_runs=0).warm_up_runs == 0

    def test_invalid_values_rejected(self) -> None:
        """Test negative warm-up and non-positive ceilings raise ValueError."""
        with pytest.raises(ValueError):
            ProfilerSettings(warm_up_runs=-1)
        with pytest.raises(ValueError):
            ProfilerSettings(max_execution_time=0)

    def test_allows(self) -> None:
        """Test an empty allow-list lets everyone in."""
        assert ProfilerSettings().allows("192.168.1.5")
        restricted = ProfilerSettings(allowed_ips=("127.0.0.1",))
        assert restricted.allows("127.0.0.1")
        assert not restricted.allows("192.168.1.5")
