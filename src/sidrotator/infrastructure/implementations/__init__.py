"""Concrete directory client implementations."""
