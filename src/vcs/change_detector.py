# src/vcs/change_detector.py — v2
"""Git-based change detection across one or more repository roots.

For every root two listings are combined: tracked files modified relative to
HEAD, and untracked files that are not ignored. Roots are queried
concurrently; the union is order independent.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from incrlint.core.errors import (
    ChangeDetectionError,
    CommandFailedError,
    UndecodableOutputError,
)
from incrlint.process.executor import run_process, which

logger = logging.getLogger(__name__)

GIT_LOCATION_CACHE = "git"

_MODIFIED_QUERY = ["diff", "HEAD", "--name-only", "-z"]
_UNTRACKED_QUERY = ["ls-files", "--others", "--exclude-standard", "-z"]


class ChangeSet(BaseModel):
    """Existing files changed under version control, unioned across roots."""

    files: list[str] = Field(default_factory=list)
    roots: list[str] = Field(default_factory=list)
    failed_roots: list[str] = Field(default_factory=list)


def locate_git(work_directory: Path) -> str:
    """Return the git executable, remembering it in the working directory.

    Raises:
        ChangeDetectionError: If git is not installed.
    """
    cache_file = Path(work_directory) / GIT_LOCATION_CACHE
    try:
        cached = cache_file.read_text(encoding="utf-8").strip()
    except OSError:
        cached = ""
    if cached and os.access(cached, os.X_OK):
        return cached

    git = which("git")
    if git is None:
        raise ChangeDetectionError(str(work_directory), "git executable not found")
    logger.debug("No cached git, found %s", git)
    try:
        cache_file.parent.mkdir(parents=True, exist_ok=True)
        cache_file.write_text(git, encoding="utf-8")
    except OSError as e:
        logger.debug("Could not cache git location: %s", e)
    return git


class ChangeDetector:
    """List changed files in git working trees.

    ``policy="fail"`` turns the first failing root into a run-aborting
    ChangeDetectionError. ``policy="isolate"`` logs the failure, skips that
    root and keeps the results of the others.
    """

    def __init__(
        self,
        git: str = "git",
        policy: Literal["fail", "isolate"] = "fail",
    ) -> None:
        self._git = git
        self._policy = policy

    async def changed_files(self, root: str | Path) -> list[str]:
        """Absolute paths of modified and untracked files under ``root``.

        Raises:
            ChangeDetectionError: If either listing fails.
        """
        root_path = Path(root)
        logger.info("Running git diff at %s", root_path)
        try:
            modified = await run_process(
                self._git, _MODIFIED_QUERY, cwd=root_path, strip=False,
            )
            untracked = await run_process(
                self._git, _UNTRACKED_QUERY, cwd=root_path, strip=False,
            )
        except (CommandFailedError, UndecodableOutputError) as e:
            raise ChangeDetectionError(str(root_path), str(e)) from e

        files: list[str] = []
        for entry in _split(modified) + _split(untracked):
            absolute = root_path / entry
            if absolute.is_file():
                files.append(str(absolute))
        return files

    async def detect(self, roots: Iterable[str | Path]) -> ChangeSet:
        """Union of ``changed_files`` over ``roots``.

        Raises:
            ChangeDetectionError: Under the ``fail`` policy, for the first
                failing root.
        """
        root_list = list(dict.fromkeys(str(r) for r in roots))
        results = await asyncio.gather(
            *(self.changed_files(root) for root in root_list),
            return_exceptions=True,
        )

        files: set[str] = set()
        failed: list[str] = []
        for root, result in zip(root_list, results):
            if isinstance(result, ChangeDetectionError):
                if self._policy == "fail":
                    raise result
                logger.error("Skipping git root %s: %s", root, result)
                failed.append(root)
                continue
            if isinstance(result, BaseException):
                raise result
            files.update(result)

        logger.info(
            "Detected %d changed files in %d roots",
            len(files), len(root_list) - len(failed),
        )
        return ChangeSet(files=sorted(files), roots=root_list, failed_roots=failed)


def _split(output: str) -> list[str]:
    return [entry for entry in output.split("\0") if entry]
