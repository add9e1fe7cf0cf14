"""User and group backends, selected by OS family."""
