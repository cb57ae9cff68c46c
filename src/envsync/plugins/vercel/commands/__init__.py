"""Vercel plugin CLI commands."""

from envsync.plugins.vercel.commands.base import (
    EXIT_CANCELLED,
    EXIT_FAILURE,
    CommandServices,
    DevOption,
    ForceOption,
    ProdOption,
    console,
    handle_vercel_error,
)

__all__ = [
    "EXIT_CANCELLED",
    "EXIT_FAILURE",
    "CommandServices",
    "DevOption",
    "ForceOption",
    "ProdOption",
    "console",
    "handle_vercel_error",
]
