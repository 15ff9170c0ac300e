# src/pipeline/commands.py — v1
"""Planned pipeline commands.

The planner only describes what has to happen; the executor runs the
commands in list order. Three kinds exist: an external tool invocation, an
informational echo of cached diagnostics, and the atomic commit of staged
state.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _CommandBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str
    output_files_directory: str


class ToolCommand(_CommandBase):
    """Run the analysis tool in one mode on an explicit file list."""

    kind: Literal["tool"] = "tool"
    mode: Literal["fix", "lint"]
    executable: str
    arguments: list[str]
    working_directory: str
    capture_path: str | None = None
    allowed_exit_codes: list[int] = Field(default_factory=lambda: [0])


class EchoCommand(_CommandBase):
    """Surface diagnostics carried over from previous runs."""

    kind: Literal["echo"] = "echo"
    message: str


class CommitCommand(_CommandBase):
    """Move the staged cache and captured output over the committed ones."""

    kind: Literal["commit"] = "commit"


Command = Annotated[
    Union[ToolCommand, EchoCommand, CommitCommand], Field(discriminator="kind")
]
