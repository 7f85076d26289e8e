"""Domain modules registered with the core."""

from .catalog import CatalogModule
from .mirror import MirrorModule

__all__ = ["CatalogModule", "MirrorModule"]
