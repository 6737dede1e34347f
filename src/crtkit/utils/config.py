"""crtkit configuration file.

Settings are read from the first YAML file found in the search path
(see ``get_config_paths``); every section is optional.

Example ``~/.config/crtkit/config.yaml``:

    runtime:
      kind: podman
      timeout: 30
    registry:
      docker_config_path: /srv/ci/docker-config.json
    output:
      default_format: json
      color: false
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from crtkit.utils.errors import ConfigurationError


class RuntimeSettings(BaseModel):
    """Engine selection and connection settings."""

    kind: str = Field(default="auto", description="Runtime kind (auto, docker, podman, containerd)")
    docker_host: str | None = Field(default=None, description="Docker daemon URL (overrides DOCKER_HOST)")
    podman_socket: str | None = Field(default=None, description="Podman API socket URL")
    timeout: int = Field(default=60, gt=0, description="Client timeout in seconds")


class RegistryConfig(BaseModel):
    """Registry credential settings."""

    docker_config_path: str | None = Field(
        default=None,
        description="Credential file used by `crtkit pull` when --config-path is not given",
    )


class OutputConfig(BaseModel):
    """CLI output settings."""

    default_format: Literal["table", "json"] = Field(default="table", description="Format of listings")
    color: bool = Field(default=True, description="Colored terminal output")
    verbose: bool = Field(default=False, description="Debug logging without --verbose")


class CrtkitConfig(BaseModel):
    """Main configuration for crtkit."""

    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def get_config_paths() -> list[Path]:
    """Get the config file search path, first match wins."""
    cwd = Path.cwd()
    home = Path.home()
    paths = [
        cwd / ".crtkit.yaml",
        cwd / ".crtkit.yml",
        cwd / "crtkit.yaml",
        home / ".crtkit.yaml",
        home / ".crtkit" / "config.yaml",
        home / ".config" / "crtkit" / "config.yaml",
    ]

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "crtkit" / "config.yaml")
    return paths


def load_config(config_path: Path | str | None = None) -> CrtkitConfig:
    """Load configuration.

    Args:
        config_path: Explicit config file; the search path when None

    Returns:
        Loaded configuration, or defaults when no file is found

    Raises:
        ConfigurationError: If an explicit file is missing, or a file is
            not valid YAML or holds invalid settings
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {path}")
        return _load_config_file(path)

    for path in get_config_paths():
        if path.is_file():
            return _load_config_file(path)
    return CrtkitConfig()


def _load_config_file(path: Path) -> CrtkitConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return CrtkitConfig()
    try:
        return CrtkitConfig.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        first_key = ".".join(map(str, e.errors()[0]["loc"])) if e.errors() else None
        raise ConfigurationError(f"Invalid settings in {path}: {errors}", config_key=first_key) from e


_config: CrtkitConfig | None = None


def get_config() -> CrtkitConfig:
    """Get the global configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: CrtkitConfig | None) -> None:
    """Replace the global configuration (None reloads it on next use)."""
    global _config
    _config = config
