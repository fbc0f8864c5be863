"""HTTP API."""

from .server import app, get_pipeline

__all__ = ["app", "get_pipeline"]
