"""Observability — logging setup and run output."""
