# src/pipeline/planner.py — v1
"""Build command planner: decides what to re-analyze and what to carry over.

A file is carried over when its modification timestamp equals the cached
one; everything else is reprocessed. Diagnostics from the previous lint pass
are attributed to carried-over files by their path prefix, and the commands
for the reprocessed subset are emitted in the only safe order: fix, lint,
cached diagnostics, commit.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from incrlint.cache.models import Cache, CacheEntry
from incrlint.core.models import SourceFile
from incrlint.pipeline.commands import Command, CommitCommand, EchoCommand, ToolCommand

if TYPE_CHECKING:
    from incrlint.cache.json_store import JsonCacheStore
    from incrlint.config.settings import Settings

logger = logging.getLogger(__name__)


class BuildPlan(BaseModel):
    """Outcome of planning one target run."""

    target: str
    files_to_process: list[str] = Field(default_factory=list)
    carried_over: list[str] = Field(default_factory=list)
    cached_diagnostics: list[str] = Field(default_factory=list)
    new_cache: dict[str, CacheEntry] = Field(default_factory=dict)
    commands: list[Command] = Field(default_factory=list)


def partition(
    incoming: Sequence[SourceFile], cache: Cache,
) -> tuple[Cache, list[str], list[str]]:
    """Split ``incoming`` into files to reprocess and files to carry over.

    Returns:
        (new_cache, to_process, carried_over). Cached paths missing from
        ``incoming`` are dropped from ``new_cache``.
    """
    new_cache: Cache = {}
    to_process: list[str] = []
    carried_over: list[str] = []

    for source in sorted(incoming, key=lambda f: f.path):
        cached = cache.get(source.path)
        if cached is not None and cached.modified == source.modified:
            new_cache[source.path] = cached.model_copy(deep=True)
            carried_over.append(source.path)
            continue
        new_cache[source.path] = CacheEntry(modified=source.modified)
        to_process.append(source.path)

    return new_cache, to_process, carried_over


def merge_prior_output(
    new_cache: Cache, prior_output: str, to_process: Sequence[str],
) -> int:
    """Attribute lines of the previous lint output to carried-over entries.

    Lines for reprocessed files are superseded by the coming lint pass; lines
    whose path is not tracked any more are dropped. Returns the number of
    lines attributed.
    """
    superseded = set(to_process)
    attributed = 0
    for line in prior_output.split("\n"):
        if not line:
            continue
        file_path = line.split(":", 1)[0]
        if file_path in superseded:
            continue
        entry = new_cache.get(file_path)
        if entry is None:
            continue
        entry.append_diagnostic(line)
        attributed += 1
    return attributed


def collect_cached_diagnostics(new_cache: Cache) -> list[str]:
    diagnostics: list[str] = []
    for entry in new_cache.values():
        diagnostics.extend(entry.diagnostics or [])
    return diagnostics


class BuildCommandPlanner:
    """Plan the commands of one incremental lint run."""

    def __init__(
        self,
        settings: Settings,
        store: JsonCacheStore,
        tool: str,
        tool_working_directory: Path,
    ) -> None:
        self._settings = settings
        self._store = store
        self._tool = tool
        self._tool_working_directory = tool_working_directory

    def plan(
        self,
        target: str,
        incoming: Sequence[SourceFile],
        cache: Cache,
        prior_output: str,
    ) -> BuildPlan:
        """Partition ``incoming`` against ``cache`` and emit the run's commands.

        With nothing to reprocess the new cache is committed right away and
        only the cached diagnostics are echoed. Otherwise the new cache is
        staged and committed by the final command.
        """
        if not incoming:
            logger.info("No input files")
            return BuildPlan(target=target)

        new_cache, to_process, carried_over = partition(incoming, cache)
        attributed = merge_prior_output(new_cache, prior_output, to_process)
        cached_diagnostics = collect_cached_diagnostics(new_cache)
        logger.debug(
            "Carried over %d files with %d stale diagnostic lines",
            len(carried_over), attributed,
        )

        output_dir = str(self._store.prepare_output_directory())
        commands: list[Command] = []

        if to_process:
            logger.info("Processing %d files", len(to_process))
            self._store.stage(new_cache)
            commands.extend(self._tool_commands(to_process, output_dir))
        else:
            logger.info("No new files to process")
            self._store.write_committed(new_cache, "")

        commands.append(EchoCommand(
            display_name=f"{target}: cached {self._store.cache_path}",
            message="\n".join(cached_diagnostics),
            output_files_directory=output_dir,
        ))

        if to_process:
            commands.append(CommitCommand(
                display_name=f"{target}: Caching results",
                output_files_directory=output_dir,
            ))

        return BuildPlan(
            target=target,
            files_to_process=to_process,
            carried_over=carried_over,
            cached_diagnostics=cached_diagnostics,
            new_cache=new_cache,
            commands=commands,
        )

    def _tool_commands(self, files: list[str], output_dir: str) -> list[ToolCommand]:
        cache_path = str(self._store.work_directory)
        file_names = " ".join(os.path.basename(f) for f in files)
        tool_name = self._settings.tool_name
        working_directory = str(self._tool_working_directory)

        fix = ToolCommand(
            display_name=f"{tool_name} --fix {file_names}",
            mode="fix",
            executable=self._tool,
            arguments=_expand(self._settings.fix_arguments, cache_path) + files,
            working_directory=working_directory,
            output_files_directory=output_dir,
        )
        # Lint must re-read the files after fix has rewritten them.
        lint = ToolCommand(
            display_name=f"{tool_name} lint {file_names}",
            mode="lint",
            executable=self._tool,
            arguments=_expand(self._settings.lint_arguments, cache_path) + files,
            working_directory=working_directory,
            output_files_directory=output_dir,
            capture_path=str(self._store.output_temp_path),
            allowed_exit_codes=list(self._settings.lint_success_exit_codes),
        )
        return [fix, lint]


def _expand(arguments: Sequence[str], cache_path: str) -> list[str]:
    return [arg.replace("{cache_path}", cache_path) for arg in arguments]
