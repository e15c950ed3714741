"""Webhook receiver that writes authenticated payloads to a console or rotating file log."""

__version__ = "0.1.0"
