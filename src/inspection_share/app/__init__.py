"""Inspection share FastAPI application."""

from .main import create_app
from .settings import AppSettings

__all__ = ["create_app", "AppSettings"]
