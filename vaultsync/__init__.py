"""Vault mobile sync server."""

__version__ = "1.0.0"
