# tests/conftest.py — v2
"""Shared test fixtures: settings, cache stores, source trees, fake tools and
temporary git repositories.

The fake analysis tool is a POSIX shell script; it records every invocation
in a log file so that tests can assert on command order.
"""

from __future__ import annotations

import logging
import os
import stat
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from incrlint.cache.json_store import JsonCacheStore
from incrlint.config.settings import Settings
from incrlint.core.models import SourceFile

_FAKE_TOOL = """#!/bin/sh
# fake analysis tool: logs its mode, warns about every file not marked clean
mode=lint
if [ "$1" = "--fix" ]; then
    mode=fix
fi
echo "$mode" >> "{log}"
if [ -n "$INCRLINT_FAKE_EXIT" ] && [ "$mode" = "lint" ]; then
    exit "$INCRLINT_FAKE_EXIT"
fi
if [ "$mode" = "lint" ]; then
    for arg in "$@"; do
        if [ -f "$arg" ] && ! grep -q "clean" "$arg"; then
            echo "$arg:1:1: warning: fake finding"
        fi
    done
fi
exit 0
"""


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def settings(work_dir: Path, project_dir: Path) -> Settings:
    return Settings(_env_file=None, work_directory=work_dir, project_dir=project_dir)


@pytest.fixture
def store(work_dir: Path) -> JsonCacheStore:
    return JsonCacheStore(work_dir)


@pytest.fixture
def make_source(project_dir: Path) -> Callable[..., SourceFile]:
    """Create a source file under the project and return its SourceFile."""

    def _make(name: str, content: str = "let x = 1\n") -> SourceFile:
        path = project_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return SourceFile.from_path(path)

    return _make


@pytest.fixture
def fake_tool(tmp_path: Path) -> tuple[Path, Path]:
    """(tool executable, invocation log)."""
    log = tmp_path / "tool.log"
    tool = tmp_path / "bin" / "swiftlint"
    tool.parent.mkdir()
    tool.write_text(_FAKE_TOOL.format(log=log))
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tool, log


def bump_mtime(path: str | Path, seconds: int = 5) -> None:
    """Move the modification time forward so staleness is unambiguous."""
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def touch() -> Callable[..., None]:
    return bump_mtime


@pytest.fixture
def git_repo(tmp_path: Path) -> Callable[[Path], Path]:
    """Initialise a git repository with one empty commit at the given path."""

    def _init(path: Path) -> Path:
        path.mkdir(parents=True, exist_ok=True)

        def git(*args: str) -> None:
            subprocess.run(["git", *args], cwd=str(path), capture_output=True, check=True)

        git("init")
        git("config", "user.email", "test@test.com")
        git("config", "user.name", "Test")
        git("commit", "--allow-empty", "-m", "init")
        return path

    return _init


def git_commit_all(path: Path, message: str = "update") -> None:
    subprocess.run(["git", "add", "."], cwd=str(path), capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", message], cwd=str(path), capture_output=True, check=True,
    )


@pytest.fixture
def commit_all() -> Callable[..., None]:
    return git_commit_all


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logging.getLogger("incrlint").handlers.clear()
