"""
Unit tests for the Stepwise configuration system.
"""

from pathlib import Path

import pytest
import yaml

from stepwise.config import (
    Config,
    ConfigurationError,
    apply_env_overrides,
    deep_merge,
    get_config,
    get_config_sources,
    load_config,
    load_yaml_file,
    set_nested_value,
)
from stepwise.storage.stores import StorageType


class TestConfigSchema:
    """Tests for configuration schema validation."""

    def test_default_config(self):
        """Test that default config is valid."""
        config = Config()

        assert config.storage.default_type == StorageType.LOCAL
        assert config.storage.state_dir is None
        assert config.submit.base_url is None
        assert config.submit.timeout_seconds == 30
        assert config.logging.level == "WARNING"

    def test_unknown_keys_rejected(self):
        """Test that typos in config are reported."""
        with pytest.raises(ValueError):
            Config.model_validate({"submit": {"base_ulr": "https://api.example.com"}})

    def test_timeout_must_be_positive(self):
        """Test submit.timeout_seconds bounds."""
        with pytest.raises(ValueError):
            Config.model_validate({"submit": {"timeout_seconds": 0}})


class TestDeepMerge:
    """Tests for deep merge functionality."""

    def test_simple_merge(self):
        """Test merging flat dictionaries."""
        assert deep_merge({"a": 1, "b": 2}, {"b": 3, "c": 4}) == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        """Test merging nested dictionaries."""
        base = {"submit": {"base_url": "https://a", "timeout_seconds": 30}}
        override = {"submit": {"timeout_seconds": 5}}

        assert deep_merge(base, override) == {"submit": {"base_url": "https://a", "timeout_seconds": 5}}

    def test_base_is_not_mutated(self):
        """Test the base dictionary is left untouched."""
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestEnvOverrides:
    """Tests for STEPWISE_* environment variables."""

    def test_nested_override(self, monkeypatch: pytest.MonkeyPatch):
        """Test double underscores separate nesting levels."""
        monkeypatch.setenv("STEPWISE_SUBMIT__TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("STEPWISE_SUBMIT__BASE_URL", "https://api.example.com")
        monkeypatch.setenv("STEPWISE_LOGGING__LEVEL", "DEBUG")

        config = load_config()

        assert config.submit.timeout_seconds == 5
        assert config.submit.base_url == "https://api.example.com"
        assert config.logging.level == "DEBUG"

    def test_value_parsing(self, monkeypatch: pytest.MonkeyPatch):
        """Test booleans and numbers are decoded."""
        monkeypatch.setenv("STEPWISE_A__FLAG", "yes")
        monkeypatch.setenv("STEPWISE_A__RATIO", "0.5")
        monkeypatch.setenv("STEPWISE_A__NAME", "plain")

        result = apply_env_overrides({})
        assert result["a"] == {"flag": True, "ratio": 0.5, "name": "plain"}

    def test_home_and_flat_keys_skipped(self, monkeypatch: pytest.MonkeyPatch):
        """Test STEPWISE_HOME and single-level keys are not settings."""
        monkeypatch.setenv("STEPWISE_DEBUG", "1")

        result = apply_env_overrides({})
        assert "home" not in result
        assert "debug" not in result

    def test_skip_env(self, monkeypatch: pytest.MonkeyPatch):
        """Test environment overrides can be disabled."""
        monkeypatch.setenv("STEPWISE_SUBMIT__TIMEOUT_SECONDS", "5")
        assert load_config(skip_env=True).submit.timeout_seconds == 30


class TestConfigFiles:
    """Tests for global and project config files."""

    def test_load_yaml_file_missing(self, temp_dir: Path):
        """Test missing files load as empty."""
        assert load_yaml_file(temp_dir / "missing.yaml") == {}

    def test_load_yaml_file_invalid(self, temp_dir: Path):
        """Test malformed YAML raises ConfigurationError."""
        path = temp_dir / "bad.yaml"
        path.write_text("submit: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_global_and_project_layers(self, stepwise_home: Path, temp_dir: Path):
        """Test project config overrides global config."""
        stepwise_home.mkdir(parents=True)
        (stepwise_home / "config.yaml").write_text(
            yaml.dump({"submit": {"base_url": "https://global", "timeout_seconds": 10}})
        )
        project = temp_dir / ".stepwise"
        project.mkdir(exist_ok=True)
        (project / "project.yaml").write_text(yaml.dump({"submit": {"timeout_seconds": 3}}))

        config = load_config()

        assert config.submit.base_url == "https://global"
        assert config.submit.timeout_seconds == 3
        assert load_config(skip_project=True).submit.timeout_seconds == 10

        sources = get_config_sources()
        assert sources["global"] == stepwise_home.resolve() / "config.yaml"
        assert sources["project"] is not None

    def test_invalid_config(self, stepwise_home: Path):
        """Test invalid values raise ConfigurationError."""
        stepwise_home.mkdir(parents=True)
        (stepwise_home / "config.yaml").write_text(yaml.dump({"logging": {"level": "LOUD"}}))

        with pytest.raises(ConfigurationError, match="validation failed"):
            load_config()

    def test_get_config_is_cached(self, monkeypatch: pytest.MonkeyPatch):
        """Test get_config caches until reloaded."""
        first = get_config()
        monkeypatch.setenv("STEPWISE_LOGGING__LEVEL", "ERROR")

        assert get_config() is first
        assert get_config(reload=True).logging.level == "ERROR"


def test_set_nested_value():
    """Test intermediate dictionaries are created."""
    assert set_nested_value({}, ["a", "b", "c"], 1) == {"a": {"b": {"c": 1}}}
    assert set_nested_value({"a": 5}, ["a", "b"], 2) == {"a": {"b": 2}}
