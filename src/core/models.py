# src/core/models.py — v3
"""Core domain models: SourceFile, BuildFile, and the Target union.

A target is either a real build target handed over by the IDE or build
system, or a synthetic one assembled from version-control changes in
standalone mode. Both expose the same read-only fields.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class FileType(str, Enum):
    """Role of a file inside a build target."""

    SOURCE = "source"
    HEADER = "header"
    RESOURCE = "resource"
    UNKNOWN = "unknown"


class TargetKind(str, Enum):
    """Product kind of a build target."""

    MAIN = "main"
    TEST = "test"

    @classmethod
    def from_product_type(cls, product_type: str) -> TargetKind:
        """Map a product type identifier (e.g. ``...bundle.unit-test``) to a kind."""
        if product_type.endswith("test") or product_type.endswith("testing"):
            return cls.TEST
        return cls.MAIN


class SourceFile(BaseModel):
    """A file on disk with its last-known modification timestamp (ns)."""

    model_config = ConfigDict(frozen=True)

    path: str
    modified: int

    @classmethod
    def from_path(cls, path: str | Path) -> SourceFile:
        """Stat ``path`` and capture its modification timestamp.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        path_str = os.fspath(path)
        return cls(path=path_str, modified=os.stat(path_str).st_mtime_ns)


class BuildFile(BaseModel):
    """A file belonging to a build target."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: FileType = FileType.SOURCE


class _TargetBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str
    kind: TargetKind = TargetKind.MAIN
    input_files: list[BuildFile] = Field(default_factory=list)

    def source_files(self, suffix: str) -> list[str]:
        """Paths of source-typed input files ending with ``suffix``."""
        return [
            f.path
            for f in self.input_files
            if f.type == FileType.SOURCE and f.path.endswith(suffix)
        ]


class RealTarget(_TargetBase):
    """Build target provided by the build system."""

    origin: Literal["real"] = "real"
    debug_build: bool = True


class SyntheticTarget(_TargetBase):
    """Target assembled from files changed under version control."""

    origin: Literal["synthetic"] = "synthetic"

    @classmethod
    def from_paths(cls, display_name: str, paths: list[str]) -> SyntheticTarget:
        return cls(
            display_name=display_name,
            input_files=[BuildFile(path=p) for p in sorted(set(paths))],
        )


Target = Annotated[Union[RealTarget, SyntheticTarget], Field(discriminator="origin")]
