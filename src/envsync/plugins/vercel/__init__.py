"""Vercel remote store plugin."""

from envsync.plugins.vercel.plugin import VercelPlugin

__all__ = ["VercelPlugin"]
