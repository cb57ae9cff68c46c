"""Service layer for envsync."""
