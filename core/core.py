"""Central coordinator that wires the catalog and mirror modules together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

from .config import Settings

logger = logging.getLogger("commands_api")


class CommandHandler(Protocol):
    """Typed callable for command handlers."""

    def __call__(self, payload: Optional[Dict[str, Any]] = None) -> Any: ...


class Module(Protocol):
    """Protocol describing the interface the core expects from modules."""

    name: str

    def attach(self, core: "Core") -> None: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def get_command_map(self) -> Dict[str, CommandHandler]: ...


@dataclass
class CommandResult:
    """Standard response envelope returned by `Core.dispatch`."""

    command: str
    handled: bool
    payload: Optional[Any] = None


class Core:
    """Application kernel that owns settings, module lifecycles and routes commands."""

    def __init__(
        self,
        modules: Optional[Iterable[Module]] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._modules: Dict[str, Module] = {}
        self._command_registry: Dict[str, CommandHandler] = {}
        if modules:
            for module in modules:
                self.register_module(module)

    @property
    def modules(self) -> Dict[str, Module]:
        """Expose registered modules (read-only)."""
        return dict(self._modules)

    def register_module(self, module: Module) -> None:
        """Attach a module, register its command handlers and start it."""
        if module.name in self._modules:
            raise ValueError(f"Module '{module.name}' already registered")
        module.attach(self)
        command_map = module.get_command_map()
        for command, handler in command_map.items():
            if command in self._command_registry:
                raise ValueError(f"Command '{command}' already bound")
            self._command_registry[command] = handler
        self._modules[module.name] = module
        module.start()
        logger.debug({"evt": "module_started", "module": module.name, "commands": sorted(command_map)})

    def unregister_module(self, name: str) -> None:
        """Remove a module and its handlers."""
        module = self._modules.pop(name, None)
        if module is None:
            return
        command_map = module.get_command_map()
        for command in command_map:
            self._command_registry.pop(command, None)
        module.stop()
        logger.debug({"evt": "module_stopped", "module": name})

    def shutdown(self) -> None:
        """Stop every module in reverse registration order."""
        for name in reversed(list(self._modules)):
            self.unregister_module(name)

    def dispatch(self, command: str, payload: Optional[Dict[str, Any]] = None) -> CommandResult:
        """Send a command into the system."""
        handler = self._command_registry.get(command)
        if handler is None:
            return CommandResult(command=command, handled=False)
        result = handler(payload or {})
        return CommandResult(command=command, handled=True, payload=result)


__all__ = ["Core", "CommandResult", "Module"]
