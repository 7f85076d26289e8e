"""Pytest fixtures for the command catalog tests."""

import json
from pathlib import Path

import pytest

from core import Core, Settings
from modules.catalog import CatalogModule
from modules.mirror import MirrorModule, MirrorSyncer
from web import create_app


class FakeMirror:
    """Stands in for GitMirror with scripted revisions."""

    def __init__(self, local=None, remote="rev-1", repo_url="https://example.invalid/cmds.git"):
        self.repo_url = repo_url
        self.local = local
        self.remote = remote
        self.fail_with = None
        self.init_calls = 0
        self.pull_calls = 0

    def ensure_initialized(self):
        self.init_calls += 1

    def local_revision(self):
        return self.local

    def remote_revision(self):
        if self.fail_with is not None:
            raise self.fail_with
        return self.remote

    def pull(self):
        self.pull_calls += 1
        self.local = self.remote
        return self.local


def write_command(root: Path, category: str, filename: str, data) -> Path:
    path = root / category / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def commands_root(tmp_path: Path) -> Path:
    root = tmp_path / "cmds"
    write_command(
        root,
        "donor",
        "convert.json",
        {
            "name": "convert",
            "help": "Convert image",
            "donor": True,
            "donor_tier": 1,
            "parameters": ["format", "url"],
        },
    )
    write_command(root, "util", "ping.json", {"name": "ping", "aliases": ["p"], "help": "Pong"})
    write_command(root, "util", "help.json", {"name": "help", "aliases": [], "help": "Show help"})
    return root


@pytest.fixture
def fake_mirror() -> FakeMirror:
    return FakeMirror()


@pytest.fixture
def core(commands_root: Path, tmp_path: Path, fake_mirror: FakeMirror):
    settings = Settings(
        commands_dir=commands_root,
        mirror_dir=tmp_path / "mirror",
        repo_url=fake_mirror.repo_url,
        poll_enabled=False,
    )
    instance = Core([CatalogModule(), MirrorModule(MirrorSyncer(fake_mirror))], settings=settings)
    yield instance
    instance.shutdown()


@pytest.fixture
def client(core):
    app = create_app(core)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def write_cmd():
    """Return the helper that writes one command file."""
    return write_command


@pytest.fixture
def mirror_factory():
    return FakeMirror
