"""HTTP API for triggering ingestion and recording applications."""

from .server import create_app, register_routes

__all__ = ["create_app", "register_routes"]
