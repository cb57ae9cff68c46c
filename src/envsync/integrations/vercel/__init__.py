"""Vercel integration for environment variable storage."""

from envsync.integrations.vercel.api_client import VercelAPIClient
from envsync.integrations.vercel.cli_client import VercelCLIClient
from envsync.integrations.vercel.config import VercelPluginConfig
from envsync.integrations.vercel.exceptions import (
    VercelAPIError,
    VercelAuthError,
    VercelBinaryNotFoundError,
    VercelCommandError,
    VercelConnectionError,
    VercelEnvExistsError,
    VercelError,
)

__all__ = [
    "VercelAPIClient",
    "VercelAPIError",
    "VercelAuthError",
    "VercelBinaryNotFoundError",
    "VercelCLIClient",
    "VercelCommandError",
    "VercelConnectionError",
    "VercelEnvExistsError",
    "VercelError",
    "VercelPluginConfig",
]
