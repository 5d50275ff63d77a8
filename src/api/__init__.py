"""API layer - REST endpoints."""

from src.api.main import app, create_app, run

__all__ = [
    "app",
    "create_app",
    "run",
]
