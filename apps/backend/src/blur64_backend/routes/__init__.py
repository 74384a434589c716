"""Backend HTTP routes."""

from .placeholder import placeholder_bp

__all__ = ["placeholder_bp"]
