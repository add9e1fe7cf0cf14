"""Local execution helpers: command runner and filesystem operations."""
