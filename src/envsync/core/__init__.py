"""Core configuration and plugin infrastructure."""
