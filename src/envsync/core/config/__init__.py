"""Configuration management with Pydantic validation."""

from envsync.core.config.models import (
    EnvironmentTarget,
    ExclusionConfig,
    PluginsConfig,
    SystemConfig,
    load_config,
)

__all__ = [
    "EnvironmentTarget",
    "ExclusionConfig",
    "PluginsConfig",
    "SystemConfig",
    "load_config",
]
