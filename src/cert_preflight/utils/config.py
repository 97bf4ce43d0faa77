"""Configuration file support for cert-preflight."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from cert_preflight.utils.errors import ConfigurationError

ENV_PREFIX = "PFLT_"

# env var suffix -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "INDEXIMAGE": ("operator", "index_image"),
    "CHANNEL": ("operator", "channel"),
    "KUBECONFIG": ("operator", "kubeconfig"),
    "SUBSCRIPTION_TIMEOUT": ("operator", "subscription_timeout"),
    "CSV_TIMEOUT": ("operator", "csv_timeout"),
    "ARTIFACTS": ("artifacts", "directory"),
    "LOGLEVEL": ("logging", "level"),
    "LOGFILE": ("logging", "file"),
}


class ArtifactsConfig(BaseModel):
    """Artifacts configuration."""

    directory: str = Field(default="artifacts", description="Directory artifacts are written to")


class OperatorConfig(BaseModel):
    """Operator deployment configuration."""

    index_image: str | None = Field(default=None, description="Catalog image containing the bundle")
    channel: str | None = Field(default=None, description="Channel override")
    kubeconfig: str | None = Field(default=None, description="Path to kubeconfig")
    context: str | None = Field(default=None, description="Kubernetes context to use")
    subscription_timeout: float = Field(default=180.0, gt=0, description="Seconds to wait for the subscription")
    csv_timeout: float = Field(default=180.0, gt=0, description="Seconds to wait for the CSV")
    poll_interval: float = Field(default=2.0, gt=0, description="Seconds between readiness probes")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    structured: bool = Field(default=False, description="Use structured log lines")
    file: str | None = Field(default=None, description="Log file path")


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="terminal", description="Default output format")
    color: bool = Field(default=True, description="Enable color output")


class PreflightConfig(BaseModel):
    """Main configuration for cert-preflight."""

    artifacts: ArtifactsConfig = Field(default_factory=ArtifactsConfig)
    operator: OperatorConfig = Field(default_factory=OperatorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def get_config_paths() -> list[Path]:
    """Get possible configuration file paths.

    Returns:
        List of paths to check for configuration files
    """
    paths = []

    # Current directory
    paths.append(Path.cwd() / ".cert-preflight.yaml")
    paths.append(Path.cwd() / "cert-preflight.yaml")

    # Home directory
    home = Path.home()
    paths.append(home / ".cert-preflight" / "config.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "cert-preflight" / "config.yaml")

    return paths


def load_config(
    config_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> PreflightConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.
        environ: Environment to read PFLT_ overrides from. Defaults to os.environ.

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If the file is missing, malformed, or invalid
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        data = _read_config_file(path)
    else:
        for path in get_config_paths():
            if path.exists():
                data = _read_config_file(path)
                break

    data = apply_env_overrides(data, os.environ if environ is None else environ)

    try:
        return PreflightConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a dict."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")
    return data


def apply_env_overrides(data: dict[str, Any], environ: Any) -> dict[str, Any]:
    """Overlay PFLT_ environment variables on top of file settings."""
    merged = {section: dict(values or {}) for section, values in data.items()}
    for suffix, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value:
            merged.setdefault(section, {})[key] = value
    return merged


def save_config(config: PreflightConfig, config_path: Path | str | None = None) -> Path:
    """Save configuration to file.

    Args:
        config: Configuration to save
        config_path: Path to save to. Defaults to ~/.cert-preflight/config.yaml

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = Path.home() / ".cert-preflight" / "config.yaml"
    else:
        config_path = Path(config_path)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    config_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    return config_path
