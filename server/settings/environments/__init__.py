"""Per-environment settings overrides."""
