"""Weighted navigation tree store."""

__version__ = "0.1.0"
