"""Core services — host inspection."""
