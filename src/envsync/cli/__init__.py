"""Command line interface for envsync."""
