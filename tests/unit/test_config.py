"""Unit tests for the config module."""

import os

import pytest

from cert_preflight.utils.config import (
    ArtifactsConfig,
    LoggingConfig,
    OperatorConfig,
    OutputConfig,
    PreflightConfig,
    apply_env_overrides,
    get_config_paths,
    load_config,
    save_config,
)
from cert_preflight.utils.errors import ConfigurationError


class TestOperatorConfig:
    """Tests for OperatorConfig model."""

    def test_default_values(self):
        """Test default values."""
        config = OperatorConfig()
        assert config.index_image is None
        assert config.channel is None
        assert config.subscription_timeout == 180.0
        assert config.csv_timeout == 180.0
        assert config.poll_interval == 2.0

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValueError):
            OperatorConfig(csv_timeout=0)


class TestPreflightConfig:
    """Tests for PreflightConfig model."""

    def test_default_values(self):
        """Test that all defaults are properly set."""
        config = PreflightConfig()
        assert isinstance(config.artifacts, ArtifactsConfig)
        assert isinstance(config.operator, OperatorConfig)
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.output, OutputConfig)
        assert config.artifacts.directory == "artifacts"
        assert config.logging.level == "INFO"
        assert config.output.format == "terminal"


class TestConfigPaths:
    """Tests for config path functions."""

    def test_get_config_paths_includes_expected(self):
        """Test that expected config paths are included."""
        paths = get_config_paths()
        path_strs = [str(p) for p in paths]

        assert any(p.endswith(".cert-preflight.yaml") for p in path_strs)
        home = os.path.expanduser("~")
        assert any(home in p for p in path_strs)

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert tmp_path / "cert-preflight" / "config.yaml" in get_config_paths()


class TestEnvOverrides:
    """Tests for PFLT_ environment overrides."""

    def test_overrides_file_values(self):
        data = {"operator": {"index_image": "from-file", "channel": "alpha"}}
        merged = apply_env_overrides(data, {"PFLT_INDEXIMAGE": "from-env"})
        assert merged["operator"]["index_image"] == "from-env"
        assert merged["operator"]["channel"] == "alpha"

    def test_does_not_mutate_input(self):
        data = {"operator": {"channel": "alpha"}}
        apply_env_overrides(data, {"PFLT_CHANNEL": "stable"})
        assert data["operator"]["channel"] == "alpha"

    def test_empty_values_ignored(self):
        merged = apply_env_overrides({}, {"PFLT_CHANNEL": ""})
        assert "operator" not in merged

    def test_numeric_values_are_validated(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(environ={"PFLT_CSV_TIMEOUT": "30", "PFLT_ARTIFACTS": "out"})
        assert config.operator.csv_timeout == 30.0
        assert config.artifacts.directory == "out"

    def test_invalid_env_value(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(environ={"PFLT_CSV_TIMEOUT": "soon"})


class TestLoadSaveConfig:
    """Tests for loading and saving configuration."""

    def test_load_config_default(self, tmp_path, monkeypatch):
        """Test loading default config when no file exists."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        config = load_config(environ={})
        assert config == PreflightConfig()

    def test_load_config_from_file(self, tmp_path):
        """Test loading config from a specific file."""
        config_path = tmp_path / "test-config.yaml"
        config_path.write_text("""
operator:
  index_image: quay.io/example/index:v1
  csv_timeout: 60
logging:
  level: DEBUG
""")

        config = load_config(config_path, environ={})
        assert config.operator.index_image == "quay.io/example/index:v1"
        assert config.operator.csv_timeout == 60.0
        assert config.logging.level == "DEBUG"

    def test_load_config_discovers_cwd_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".cert-preflight.yaml").write_text("artifacts:\n  directory: results\n")
        assert load_config(environ={}).artifacts.directory == "results"

    def test_load_config_file_not_found(self, tmp_path):
        """Test that loading nonexistent config raises error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nonexistent.yaml")

    def test_load_config_invalid_yaml(self, tmp_path):
        """Test that invalid YAML raises error."""
        config_path = tmp_path / "invalid.yaml"
        config_path.write_text("invalid: yaml: content: :")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(config_path)

    def test_load_config_not_a_mapping(self, tmp_path):
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_path)

    def test_load_config_empty_file(self, tmp_path):
        """Test loading empty config file returns default."""
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        assert load_config(config_path, environ={}) == PreflightConfig()

    def test_save_and_reload(self, tmp_path):
        """Saved configuration loads back unchanged."""
        config = PreflightConfig(
            operator=OperatorConfig(index_image="quay.io/example/index:v1", channel="stable"),
        )
        path = save_config(config, tmp_path / "nested" / "config.yaml")

        assert path.exists()
        assert load_config(path, environ={}) == config
