"""Core domain: models, resources, engine, configuration."""
