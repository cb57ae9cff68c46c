"""Vercel remote store configuration models."""

from __future__ import annotations

import os
import shlex
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class VercelPluginConfig(BaseModel):
    """Configuration for the Vercel remote store.

    Two backends are supported: ``cli`` shells out to the vercel CLI (the
    project must already be linked), ``api`` talks to the REST API with a
    pre-issued token.
    """

    model_config = ConfigDict(extra="forbid")

    backend: Literal["cli", "api"] = "cli"
    command: list[str] = ["vercel"]
    token: str | None = None
    scope: str | None = None
    project_id: str | None = None
    team_id: str | None = None
    api_url: str = "https://api.vercel.com"
    timeout: float | None = None

    @field_validator("command", mode="before")
    @classmethod
    def split_command(cls, v: Any) -> Any:
        """Accept the command as a shell-style string."""
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Validate command is not empty."""
        if not v:
            raise ValueError("command must not be empty")
        return v

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate API URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @model_validator(mode="after")
    def validate_api_backend(self) -> VercelPluginConfig:
        """The api backend needs a token and a project."""
        if self.backend == "api":
            if not self.token:
                raise ValueError("backend 'api' requires a token")
            if not self.project_id:
                raise ValueError("backend 'api' requires a project_id")
        return self

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> VercelPluginConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            ENVSYNC_VERCEL_BACKEND: Backend to use (cli, api)
            ENVSYNC_VERCEL_COMMAND: CLI command prefix (e.g. "bun vercel")
            ENVSYNC_VERCEL_TOKEN: Access token (VERCEL_TOKEN is used as fallback)
            ENVSYNC_VERCEL_SCOPE: Team scope passed to the CLI
            ENVSYNC_VERCEL_PROJECT_ID: Project ID for the api backend
            ENVSYNC_VERCEL_TEAM_ID: Team ID for the api backend
        """
        config_dict = base_config.copy() if base_config else {}

        if backend := os.environ.get("ENVSYNC_VERCEL_BACKEND"):
            config_dict["backend"] = backend

        if command := os.environ.get("ENVSYNC_VERCEL_COMMAND"):
            config_dict["command"] = command

        if token := os.environ.get("ENVSYNC_VERCEL_TOKEN"):
            config_dict["token"] = token
        elif not config_dict.get("token") and (token := os.environ.get("VERCEL_TOKEN")):
            config_dict["token"] = token

        if scope := os.environ.get("ENVSYNC_VERCEL_SCOPE"):
            config_dict["scope"] = scope

        if project_id := os.environ.get("ENVSYNC_VERCEL_PROJECT_ID"):
            config_dict["project_id"] = project_id

        if team_id := os.environ.get("ENVSYNC_VERCEL_TEAM_ID"):
            config_dict["team_id"] = team_id

        return cls.model_validate(config_dict)
