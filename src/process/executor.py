# src/process/executor.py — v2
"""External process execution.

``run_process`` is the single place where subprocesses are spawned. The
``ProcessExecutor`` runs planned commands one after another and stops at the
first failure, so a failed fix or lint pass never reaches the commit.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from incrlint.config.settings import ConfigurationError
from incrlint.core.errors import CommandFailedError, UndecodableOutputError
from incrlint.logging.context import set_stage
from incrlint.pipeline.commands import CommitCommand, EchoCommand, ToolCommand

if TYPE_CHECKING:
    from incrlint.cache.base_cache_store import BaseCacheStore
    from incrlint.config.settings import Settings
    from incrlint.pipeline.commands import Command

logger = logging.getLogger(__name__)


async def run_process(
    executable: str,
    args: Sequence[str],
    cwd: str | Path | None = None,
    allowed_exit_codes: Sequence[int] = (0,),
    strip: bool = True,
) -> str:
    """Run ``executable`` and return its decoded stdout.

    Surrounding whitespace is stripped unless ``strip`` is false, which
    NUL-separated listings need to keep names intact.

    Raises:
        CommandFailedError: If the process cannot be started or exits with a
            status outside ``allowed_exit_codes``.
        UndecodableOutputError: If stdout is not valid UTF-8.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandFailedError(executable, 127, str(e)) from e

    stdout, stderr = await proc.communicate()
    stderr_text = stderr.decode("utf-8", errors="replace")
    if proc.returncode not in allowed_exit_codes:
        raise CommandFailedError(executable, proc.returncode, stderr_text)
    if stderr_text.strip():
        logger.debug("%s stderr: %s", executable, stderr_text.strip()[:500])

    try:
        output = stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise UndecodableOutputError(executable, e) from e
    return output.strip() if strip else output


def which(name: str) -> str | None:
    """Locate ``name`` on PATH."""
    return shutil.which(name)


def locate_tool(settings: Settings) -> str:
    """Resolve the analysis tool executable.

    Order: configured path, PATH lookup, then ``bin/<tool>`` inside the
    package artifacts of the build's derived data.

    Raises:
        ConfigurationError: If the tool cannot be found.
    """
    if settings.tool_path is not None:
        if not os.access(settings.tool_path, os.X_OK):
            raise ConfigurationError(f"TOOL_PATH is not executable: {settings.tool_path}")
        return str(settings.tool_path)

    found = which(settings.tool_name)
    if found:
        return found

    artifacts = settings.package_artifacts_dir
    if artifacts is not None and artifacts.is_dir():
        for candidate in sorted(artifacts.rglob(f"bin/{settings.tool_name}")):
            if os.access(candidate, os.X_OK):
                return str(candidate)

    raise ConfigurationError(f"Analysis tool not found: {settings.tool_name}")


class ProcessExecutor:
    """Run planned commands strictly in order."""

    def __init__(self, store: BaseCacheStore, stdout: TextIO | None = None) -> None:
        self._store = store
        self._stdout = stdout

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    async def execute(self, commands: Sequence[Command]) -> None:
        """Run ``commands`` one at a time; the first failure aborts the rest.

        Raises:
            CommandFailedError, UndecodableOutputError, OSError: From the
                failing command. Nothing after it runs.
        """
        try:
            for command in commands:
                logger.info("Running %s", command.display_name)
                if isinstance(command, ToolCommand):
                    set_stage(command.mode)
                    await self._run_tool(command)
                elif isinstance(command, EchoCommand):
                    set_stage("cached")
                    self._echo(command.message)
                elif isinstance(command, CommitCommand):
                    set_stage("commit")
                    self._store.commit()
                else:
                    raise TypeError(f"Unknown command: {command!r}")
        finally:
            set_stage(None)

    async def _run_tool(self, command: ToolCommand) -> None:
        output = await run_process(
            command.executable,
            command.arguments,
            cwd=command.working_directory,
            allowed_exit_codes=command.allowed_exit_codes,
        )
        self._echo(output)
        if command.capture_path is not None and output:
            with open(command.capture_path, "a", encoding="utf-8") as f:
                f.write(output + "\n")

    def _echo(self, message: str) -> None:
        if message:
            self.stdout.write(message + "\n")
            self.stdout.flush()
