"""Cached, display-ready listing of n8n workflow files hosted on GitHub."""

__version__ = "0.1.0"
