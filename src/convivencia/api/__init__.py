"""HTTP API for the case service."""
from __future__ import annotations

from .main import create_app

__all__ = ["create_app"]
