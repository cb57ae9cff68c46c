"""Utility modules for envsync."""

from envsync.utils.dotenv import parse_env_content, serialize_env

__all__ = ["parse_env_content", "serialize_env"]
