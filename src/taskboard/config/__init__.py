"""Configuration layer — TOML sections, unified settings, logging setup."""
