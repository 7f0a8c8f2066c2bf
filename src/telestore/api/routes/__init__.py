"""API route modules."""

from telestore.api.routes import files, health

__all__ = ["files", "health"]
