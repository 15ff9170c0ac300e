# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests against real git and a fake lint tool.

Integration tests spawn real subprocesses. Tests marked ``git`` are skipped
when no git executable is installed.
"""

from __future__ import annotations

import shutil

import pytest


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "git: marks tests requiring a git executable")


def pytest_collection_modifyitems(config, items):
    if shutil.which("git") is not None:
        return
    skip_git = pytest.mark.skip(reason="git not available")
    for item in items:
        if "git" in item.keywords:
            item.add_marker(skip_git)
