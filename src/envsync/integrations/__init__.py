"""Remote store integrations."""
