"""Exception types shared by the catalog, the mirror syncer and the web layer."""

from __future__ import annotations

from pathlib import Path


class CatalogError(Exception):
    """Base error for catalog lookups that surface to HTTP clients."""

    status = 404


class CategoryNotFound(CatalogError):
    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Category '{category}' not found")


class CommandNotFound(CatalogError):
    def __init__(self, category: str, name: str) -> None:
        self.category = category
        self.name = name
        super().__init__(f"Command '{name}' not found in category '{category}'")


class RecordParseError(Exception):
    """A single command file could not be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Error loading {path}: {reason}")


class SyncError(Exception):
    """Any failure inside a mirror check/pull cycle."""


__all__ = [
    "CatalogError",
    "CategoryNotFound",
    "CommandNotFound",
    "RecordParseError",
    "SyncError",
]
