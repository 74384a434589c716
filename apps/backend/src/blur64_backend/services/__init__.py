"""Backend services."""

from .placeholder_service import PlaceholderService

__all__ = ["PlaceholderService"]
