#!/usr/bin/env python3
"""Pull-based git mirror of the remote command repository."""

from __future__ import annotations

import logging
import os
import subprocess
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from core.errors import SyncError

from .base import BaseModule

logger = logging.getLogger("commands_api.mirror")

STATUS_UPDATED = "updated"
STATUS_UNCHANGED = "unchanged"
STATUS_ERROR = "error"

MSG_UPDATED = "Repository updated successfully"
MSG_UNCHANGED = "No updates available"
MSG_NO_REMOTE = "No repository URL configured"

MIN_POLL_INTERVAL = 1.0
MAX_POLL_INTERVAL = 86400.0


@dataclass
class SyncResult:
    """Outcome of one check-then-pull cycle."""

    status: str
    message: str
    revision: Optional[str] = None
    checked_at: float = field(default_factory=time.time)

    @property
    def success(self) -> bool:
        return self.status == STATUS_UPDATED

    def to_dict(self) -> dict:
        data = asdict(self)
        data["success"] = self.success
        return data


class GitMirror:
    """Thin wrapper around the git CLI for one local checkout."""

    def __init__(self, path: Path, repo_url: str, branch: str = "main", timeout: float = 60.0) -> None:
        self.path = Path(path)
        self.repo_url = repo_url
        self.branch = branch
        self.timeout = timeout

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        try:
            result = subprocess.run(
                cmd,
                cwd=self.path,
                env=env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise SyncError(f"git {args[0]} timed out after {self.timeout:g}s") from exc
        except OSError as exc:
            raise SyncError(f"git {args[0]} could not run: {exc}") from exc
        if check and result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise SyncError(f"git {args[0]} failed ({result.returncode}): {detail}")
        return result

    @property
    def initialized(self) -> bool:
        return (self.path / ".git").exists()

    def ensure_initialized(self) -> None:
        """Create the checkout and register `origin`; safe to call repeatedly."""
        if not self.initialized:
            if self.path.is_dir() and any(self.path.iterdir()):
                # The first checkout refuses to overwrite untracked files.
                logger.warning({"evt": "mirror_dir_not_empty", "path": str(self.path)})
            self.path.mkdir(parents=True, exist_ok=True)
            self._git("init")
            self._git("remote", "add", "origin", self.repo_url)
            logger.info({"evt": "mirror_initialized", "path": str(self.path), "remote": self.repo_url})
            return
        current = self._git("remote", "get-url", "origin", check=False)
        if current.returncode != 0:
            self._git("remote", "add", "origin", self.repo_url)
        elif current.stdout.strip() != self.repo_url:
            self._git("remote", "set-url", "origin", self.repo_url)
            logger.info({"evt": "mirror_remote_changed", "remote": self.repo_url})

    def local_revision(self) -> Optional[str]:
        """HEAD of the checkout, or None before the first pull."""
        result = self._git("rev-parse", "--verify", "--quiet", "HEAD", check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def remote_revision(self) -> str:
        """Fetch the tracked branch and return its tip without touching the work tree."""
        self._git("fetch", "origin", self.branch)
        return self._git("rev-parse", f"origin/{self.branch}").stdout.strip()

    def pull(self) -> str:
        if self.local_revision() is None:
            self._git("checkout", "-B", self.branch, f"origin/{self.branch}")
        else:
            self._git("pull", "--no-edit", "origin", self.branch)
        revision = self.local_revision()
        if revision is None:
            raise SyncError("checkout has no HEAD after pull")
        return revision


class MirrorSyncer:
    """Runs sync cycles one at a time; a trigger that arrives mid-cycle waits its turn."""

    def __init__(self, mirror: Optional[GitMirror]) -> None:
        self._mirror = mirror
        self._lock = threading.Lock()
        self._last_result: Optional[SyncResult] = None

    @property
    def last_result(self) -> Optional[SyncResult]:
        return self._last_result

    @property
    def enabled(self) -> bool:
        return self._mirror is not None and bool(self._mirror.repo_url)

    def initialize(self) -> None:
        if not self.enabled:
            return
        try:
            self._mirror.ensure_initialized()
        except SyncError as exc:
            logger.error({"evt": "mirror_init_error", "error": str(exc)})

    def sync(self) -> SyncResult:
        with self._lock:
            result = self._run_cycle()
            self._last_result = result
        return result

    def _run_cycle(self) -> SyncResult:
        if not self.enabled:
            return SyncResult(status=STATUS_ERROR, message=MSG_NO_REMOTE)
        mirror = self._mirror
        try:
            mirror.ensure_initialized()
            local = mirror.local_revision()
            remote = mirror.remote_revision()
            if local == remote:
                logger.debug({"evt": "sync_unchanged", "revision": local})
                return SyncResult(status=STATUS_UNCHANGED, message=MSG_UNCHANGED, revision=local)
            revision = mirror.pull()
        except (SyncError, OSError) as exc:
            logger.error({"evt": "sync_error", "error": str(exc)})
            return SyncResult(status=STATUS_ERROR, message=f"Update failed: {exc}")
        logger.info({"evt": "sync_updated", "from": local, "revision": revision})
        return SyncResult(status=STATUS_UPDATED, message=MSG_UPDATED, revision=revision)


class MirrorPoller(threading.Thread):
    """Background task: one sync at start, then one per interval until stopped."""

    def __init__(self, syncer: MirrorSyncer, interval: float = 300.0) -> None:
        super().__init__(name="mirror_poller", daemon=True)
        self._syncer = syncer
        self._interval = min(MAX_POLL_INTERVAL, max(MIN_POLL_INTERVAL, float(interval)))
        self._cancel = threading.Event()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self):
        while not self._cancel.is_set():
            try:
                self._syncer.sync()
            except Exception as exc:
                logger.error({"evt": "mirror_poller_error", "error": str(exc)})
            if self._cancel.wait(self._interval):
                break

    def stop(self, timeout: Optional[float] = None) -> None:
        self._cancel.set()
        if self.is_alive():
            self.join(timeout)


class MirrorModule(BaseModule):
    """Owns the syncer and its poller for the lifetime of the core."""

    name = "mirror"

    def __init__(self, syncer: Optional[MirrorSyncer] = None) -> None:
        super().__init__()
        self._syncer = syncer
        self._poller: Optional[MirrorPoller] = None

    @property
    def syncer(self) -> MirrorSyncer:
        if self._syncer is None:
            settings = self.settings
            mirror = None
            if settings.repo_url:
                mirror = GitMirror(
                    settings.mirror_dir,
                    settings.repo_url,
                    branch=settings.repo_branch,
                    timeout=settings.git_timeout,
                )
            self._syncer = MirrorSyncer(mirror)
        return self._syncer

    @property
    def poller(self) -> Optional[MirrorPoller]:
        return self._poller

    def build_command_map(self):
        return {
            "mirror.sync": self._handle_sync,
            "mirror.status": self._handle_status,
        }

    def start(self) -> None:
        syncer = self.syncer
        if not syncer.enabled:
            self.log_event("mirror_disabled", reason=MSG_NO_REMOTE)
            return
        syncer.initialize()
        if self.settings.poll_enabled:
            self._poller = MirrorPoller(syncer, self.settings.poll_interval_seconds)
            self._poller.start()
            self.log_event("mirror_poller_started", interval=self.settings.poll_interval_seconds)

    def stop(self) -> None:
        if self._poller is not None:
            self._poller.stop(timeout=self.settings.git_timeout)
            self._poller = None
            self.log_event("mirror_poller_stopped")

    def _handle_sync(self, payload=None) -> SyncResult:
        return self.syncer.sync()

    def _handle_status(self, payload=None) -> Optional[SyncResult]:
        return self.syncer.last_result


__all__ = [
    "GitMirror",
    "MirrorModule",
    "MirrorPoller",
    "MirrorSyncer",
    "SyncResult",
    "STATUS_ERROR",
    "STATUS_UNCHANGED",
    "STATUS_UPDATED",
]
