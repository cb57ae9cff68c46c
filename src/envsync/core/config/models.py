"""Configuration models for envsync.

The configuration lives in ``.envsync.yaml`` next to the env files of the
project. Every section is optional; a missing file means defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from envsync.services.envsync.exclusions import (
    DEFAULT_ENVIRONMENT_EXCLUSIONS,
    DEFAULT_GLOBAL_EXCLUSIONS,
    ExclusionPolicy,
)
from envsync.services.envsync.local_store import DEFAULT_LOCAL_FILES
from envsync.services.envsync.models import Environment

# Project-local config, resolved against the working directory
CONFIG_FILE = Path(".envsync.yaml")

CONFIG_HEADER = """\
# envsync configuration
# Maps each environment to a local dotenv file and a remote environment,
# lists variables that are never pulled or deleted remotely, and configures
# the remote store plugin.

"""


class EnvironmentTarget(BaseModel):
    """Where one environment's variables live."""

    model_config = ConfigDict(extra="forbid")

    local_file: str
    remote_environment: str

    @field_validator("local_file", "remote_environment")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate the value is not blank."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


def _default_environments() -> dict[Environment, EnvironmentTarget]:
    return {
        env: EnvironmentTarget(local_file=DEFAULT_LOCAL_FILES[env], remote_environment=env.value)
        for env in Environment
    }


class ExclusionConfig(BaseModel):
    """Variables never offered pull or remote deletion.

    ``all`` applies to every environment; the per-environment lists add to it.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    all_environments: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_EXCLUSIONS), alias="all"
    )
    development: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENVIRONMENT_EXCLUSIONS[Environment.DEVELOPMENT])
    )
    production: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENVIRONMENT_EXCLUSIONS[Environment.PRODUCTION])
    )

    def policy(self) -> ExclusionPolicy:
        """Build the immutable policy used by the diff and deletion workflows."""
        return ExclusionPolicy.from_lists(
            self.all_environments,
            {
                Environment.DEVELOPMENT: self.development,
                Environment.PRODUCTION: self.production,
            },
        )


class PluginsConfig(BaseModel):
    """Plugin configuration.

    Each plugin reads its own section, keyed by plugin name.
    """

    model_config = ConfigDict(extra="allow")

    enabled: list[str] = Field(default_factory=lambda: ["vercel"])
    vercel: dict[str, Any] = Field(
        default_factory=lambda: {"backend": "cli", "command": "vercel"}
    )


class SystemConfig(BaseModel):
    """Root configuration model."""

    version: str = "1.0"
    environments: dict[Environment, EnvironmentTarget] = Field(
        default_factory=_default_environments
    )
    exclusions: ExclusionConfig = Field(default_factory=ExclusionConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @field_validator("environments")
    @classmethod
    def validate_environments(
        cls, v: dict[Environment, EnvironmentTarget]
    ) -> dict[Environment, EnvironmentTarget]:
        """Fill in defaults for environments the file leaves out."""
        return {**_default_environments(), **v}

    def local_files(self) -> dict[Environment, str]:
        """Local file name per environment."""
        return {env: target.local_file for env, target in self.environments.items()}

    def remote_namespaces(self) -> dict[Environment, str]:
        """Remote environment name per environment."""
        return {env: target.remote_environment for env, target in self.environments.items()}

    def exclusion_policy(self) -> ExclusionPolicy:
        """Exclusion policy described by the ``exclusions`` section."""
        return self.exclusions.policy()

    def plugin_config(self, name: str) -> dict[str, Any]:
        """Raw configuration section for plugin name."""
        section = self.plugins.model_dump().get(name, {})
        return section if isinstance(section, dict) else {}

    def to_yaml(self) -> str:
        """Serialize configuration to YAML with a comment header."""
        data = self.model_dump(mode="json", by_alias=True)
        return CONFIG_HEADER + yaml.safe_dump(data, sort_keys=False, default_flow_style=False)


def load_raw_config(path: Path | None = None) -> dict[str, Any]:
    """Load the config file as a plain dict.

    Returns an empty dict if the file is missing or is not valid YAML.
    """
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None) -> SystemConfig | None:
    """Load and validate the config file.

    Returns:
        The configuration, or None if the file does not exist.

    Raises:
        ValueError: If the file is not valid YAML or fails validation.
    """
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return None
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    return SystemConfig.model_validate(data or {})
