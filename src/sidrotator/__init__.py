"""Device security identifier rotation backend."""

__version__ = "1.0.0"
