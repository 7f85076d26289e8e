"""Base classes for domain modules."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from core.config import Settings
from core.core import CommandHandler, Core


class BaseModule:
    """Default implementation that other modules can extend."""

    name = "base"
    logger = logging.getLogger("commands_api")

    def __init__(self) -> None:
        self.core: Optional[Core] = None
        self._command_map: Dict[str, CommandHandler] = {}

    # Lifecycle -----------------------------------------------------------
    def attach(self, core: Core) -> None:
        self.core = core
        self._command_map = self.build_command_map() or {}

    def start(self) -> None:  # pragma: no cover - default no-op
        pass

    def stop(self) -> None:  # pragma: no cover - default no-op
        pass

    @property
    def settings(self) -> Settings:
        if self.core is None:
            raise RuntimeError("Module is not attached to a core")
        return self.core.settings

    # Command map ---------------------------------------------------------
    def build_command_map(self) -> Dict[str, CommandHandler]:
        """Modules override to declare commands -> handlers."""
        return {}

    def get_command_map(self) -> Dict[str, CommandHandler]:
        return dict(self._command_map)

    # Utilities -----------------------------------------------------------
    def log_event(self, evt: str, *, level: int = logging.INFO, **extra) -> None:
        payload = {"evt": evt, "module": self.name}
        payload.update(extra)
        self.logger.log(level, payload)
