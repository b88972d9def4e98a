"""data — Static game data (variant table, tuning.toml)."""
