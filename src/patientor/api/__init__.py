"""Reference REST backend for patientor (FastAPI + JSON-file store)."""

from .main import create_app

__all__ = ["create_app"]
