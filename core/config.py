"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


def _read_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _read_env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(str(raw).strip())
    except (TypeError, ValueError):
        return default


def _read_env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "on", "yes")


@dataclass(frozen=True)
class Settings:
    """Everything the service needs to know at startup."""

    port: int = 7000
    bind_address: str = "0.0.0.0"
    repo_url: str = ""
    repo_branch: str = "main"
    poll_interval_seconds: float = 300.0
    mirror_dir: Path = Path("mirror")
    commands_dir: Optional[Path] = None
    git_timeout: float = 60.0
    poll_enabled: bool = True
    cors_max_age: int = 86400
    log_level: str = "INFO"

    @property
    def commands_root(self) -> Path:
        """Directory holding one subdirectory per category."""
        if self.commands_dir is not None:
            return self.commands_dir
        return self.mirror_dir / "cmds"

    @classmethod
    def from_env(cls) -> "Settings":
        commands_dir = os.getenv("COMMANDS_DIR", "").strip()
        return cls(
            port=_read_env_int("PORT", cls.port),
            bind_address=os.getenv("BIND_ADDRESS", cls.bind_address).strip() or cls.bind_address,
            repo_url=os.getenv("REPO_URL", "").strip(),
            repo_branch=os.getenv("REPO_BRANCH", cls.repo_branch).strip() or cls.repo_branch,
            poll_interval_seconds=_read_env_float("POLL_INTERVAL_SECONDS", cls.poll_interval_seconds),
            mirror_dir=Path(os.getenv("MIRROR_DIR", "").strip() or cls.mirror_dir),
            commands_dir=Path(commands_dir) if commands_dir else None,
            git_timeout=_read_env_float("GIT_TIMEOUT", cls.git_timeout),
            poll_enabled=_read_env_bool("SYNC_POLL_ENABLED", cls.poll_enabled),
            cors_max_age=_read_env_int("CORS_MAX_AGE", cls.cors_max_age),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).strip().upper() or cls.log_level,
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


__all__ = ["Settings"]
