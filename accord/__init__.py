"""accord — lightweight declarative configuration management."""

__version__ = "0.1.0"
