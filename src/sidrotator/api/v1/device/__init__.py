"""Device security identifier endpoints."""
