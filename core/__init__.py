"""Core package exposing the central coordinator and shared utilities."""

from .config import Settings
from .core import CommandResult, Core

__all__ = ["CommandResult", "Core", "Settings"]
