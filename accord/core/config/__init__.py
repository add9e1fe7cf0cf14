"""Configuration — settings file and manifest loading."""
