# src/core/errors.py — v1
"""Exception hierarchy shared by all incrlint subsystems.

Recoverable conditions (corrupt cache, unreadable prior output) never raise;
everything defined here aborts the run before anything is committed.
"""

from __future__ import annotations


class IncrlintError(Exception):
    """Base class for all fatal incrlint errors."""


class DescriptorDecodeError(IncrlintError):
    """Raised when the IDE project descriptor cannot be decoded."""


class ProjectGraphCycleError(IncrlintError):
    """Raised when a parent chain in the project graph loops back on itself."""

    def __init__(self, key: str, chain: list[str]) -> None:
        self.key = key
        self.chain = chain
        super().__init__(
            f"Cycle in project graph while resolving {key!r}: "
            + " -> ".join(chain)
        )


class ChangeDetectionError(IncrlintError):
    """Raised when a version-control listing query fails."""

    def __init__(self, root: str, message: str) -> None:
        self.root = root
        super().__init__(f"{root}: {message}")


class CommandFailedError(IncrlintError):
    """Raised when an external command exits with a disallowed status."""

    def __init__(
        self,
        executable: str,
        returncode: int,
        stderr: str = "",
    ) -> None:
        self.executable = executable
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()[:500]}" if stderr.strip() else ""
        super().__init__(f"{executable} exited with status {returncode}{detail}")


class UndecodableOutputError(IncrlintError):
    """Raised when an external command writes non-UTF-8 bytes to stdout."""

    def __init__(self, executable: str, error: UnicodeDecodeError) -> None:
        self.executable = executable
        super().__init__(f"Could not decode output of {executable}: {error}")
