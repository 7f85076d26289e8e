#!/usr/bin/env python3
"""Flat-file command catalog: one directory per category, one JSON file per command."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from core.errors import CategoryNotFound, CommandNotFound, RecordParseError

from .base import BaseModule

logger = logging.getLogger("commands_api.catalog")

Command = Dict[str, Any]
Catalog = Dict[str, List[Command]]


def _category_dirs(root: Path) -> List[Path]:
    if not root.is_dir():
        return []
    return sorted(
        (entry for entry in root.iterdir() if entry.is_dir() and not entry.name.startswith(".")),
        key=lambda entry: entry.name,
    )


def _read_command(path: Path, category: str) -> Command:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        raise RecordParseError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise RecordParseError(path, "top-level JSON value must be an object")
    data["category"] = category
    return data


def _load_category(category_dir: Path) -> List[Command]:
    commands: List[Command] = []
    for cmd_file in sorted(category_dir.glob("*.json")):
        if cmd_file.name.startswith(".") or not cmd_file.is_file():
            continue
        try:
            commands.append(_read_command(cmd_file, category_dir.name))
        except RecordParseError as exc:
            logger.error({"evt": "command_load_error", "file": str(exc.path), "error": exc.reason})
    return commands


def load_catalog(root: Path) -> Catalog:
    """Read every category under `root`. A missing root gives an empty catalog."""
    root = Path(root)
    catalog: Catalog = {}
    for category_dir in _category_dirs(root):
        catalog[category_dir.name] = _load_category(category_dir)
    return catalog


def all_commands(root: Path) -> Catalog:
    return load_catalog(root)


def commands_in_category(root: Path, category: str) -> List[Command]:
    catalog = load_catalog(root)
    if category not in catalog:
        raise CategoryNotFound(category)
    return catalog[category]


def find_command(root: Path, category: str, name: str) -> Command:
    """Return the first command called `name` in `category`."""
    for command in commands_in_category(root, category):
        if command.get("name") == name:
            return command
    raise CommandNotFound(category, name)


def catalog_etag(payload: Any) -> str:
    """Fingerprint of a response payload, stable across key order."""
    data = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha1(data).hexdigest()


class CatalogModule(BaseModule):
    """Exposes catalog queries to the core."""

    name = "catalog"

    def build_command_map(self):
        return {
            "catalog.all": self._handle_all,
            "catalog.category": self._handle_category,
            "catalog.command": self._handle_command,
        }

    @property
    def root(self) -> Path:
        return self.settings.commands_root

    def _handle_all(self, payload=None) -> Catalog:
        return all_commands(self.root)

    def _handle_category(self, payload=None) -> List[Command]:
        payload = payload or {}
        return commands_in_category(self.root, str(payload.get("category", "")))

    def _handle_command(self, payload=None) -> Command:
        payload = payload or {}
        return find_command(self.root, str(payload.get("category", "")), str(payload.get("name", "")))


__all__ = [
    "Catalog",
    "CatalogModule",
    "Command",
    "all_commands",
    "catalog_etag",
    "commands_in_category",
    "find_command",
    "load_catalog",
]
