"""Core utilities: logging and request trace context."""
