#!/usr/bin/env python3
"""Project entry point. Bootstraps the application core and web server."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from core import Core, Settings
from modules import CatalogModule, MirrorModule
from web import create_app

logger = logging.getLogger("commands_api")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve the command catalog over HTTP and keep it mirrored from git."
    )
    parser.add_argument("--port", type=int, default=None, help="Listening port (env PORT, default: 7000).")
    parser.add_argument("--bind", dest="bind_address", default=None, help="Bind address (env BIND_ADDRESS, default: 0.0.0.0).")
    parser.add_argument("--repo-url", default=None, help="Remote repository to mirror (env REPO_URL).")
    parser.add_argument("--branch", dest="repo_branch", default=None, help="Branch to follow (env REPO_BRANCH, default: main).")
    parser.add_argument(
        "--poll-interval",
        dest="poll_interval_seconds",
        type=float,
        default=None,
        help="Seconds between sync cycles (env POLL_INTERVAL_SECONDS, default: 300).",
    )
    parser.add_argument("--mirror-dir", type=Path, default=None, help="Local checkout (env MIRROR_DIR, default: mirror).")
    parser.add_argument(
        "--commands-dir",
        type=Path,
        default=None,
        help="Catalog root (env COMMANDS_DIR, default: <mirror-dir>/cmds).",
    )
    parser.add_argument("--no-poll", action="store_true", help="Do not start the background sync poller.")
    parser.add_argument("--log-level", default=None, help="Logging level (env LOG_LEVEL, default: INFO).")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env().with_overrides(
        port=args.port,
        bind_address=args.bind_address,
        repo_url=args.repo_url,
        repo_branch=args.repo_branch,
        poll_interval_seconds=args.poll_interval_seconds,
        mirror_dir=args.mirror_dir,
        commands_dir=args.commands_dir,
        log_level=args.log_level.upper() if args.log_level else None,
    )
    if args.no_poll:
        settings = settings.with_overrides(poll_enabled=False)
    return settings


def build_core(settings: Settings) -> Core:
    """Register the catalog and mirror modules with the core."""
    return Core([CatalogModule(), MirrorModule()], settings=settings)


def main(argv: Optional[Sequence[str]] = None) -> None:
    settings = build_settings(parse_args(argv))
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s %(levelname)s %(message)s',
    )
    logger.info({
        "evt": "startup",
        "component": "commands_api",
        "port": settings.port,
        "bind": settings.bind_address,
        "commands_root": str(settings.commands_root),
        "repo_url": settings.repo_url or None,
        "log_level": settings.log_level,
    })

    core = build_core(settings)
    app = create_app(core)
    try:
        app.run(host=settings.bind_address, port=settings.port, threaded=True)
    finally:
        core.shutdown()
        logger.info({"evt": "shutdown", "component": "commands_api"})


if __name__ == "__main__":
    main()
