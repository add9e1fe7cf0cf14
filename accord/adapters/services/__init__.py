"""Init system backends, one module per service manager."""
