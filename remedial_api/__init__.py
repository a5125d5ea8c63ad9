"""HTTP persistence service for remedial reading sessions."""
from .app import create_app

__all__ = ["create_app"]
