"""Version information for envsync."""

__version__ = "0.1.0"
