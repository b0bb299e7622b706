"""HTTP query API over the stored activity."""

from .app import create_app
from .routes import router

__all__ = ["create_app", "router"]
