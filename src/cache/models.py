# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheDocument, ProjectCache."""

from __future__ import annotations

from pydantic import BaseModel, RootModel


class CacheEntry(BaseModel):
    """Per-file state as of the last successful analysis."""

    modified: int
    diagnostics: list[str] | None = None

    def append_diagnostic(self, line: str) -> None:
        if self.diagnostics is None:
            self.diagnostics = []
        self.diagnostics.append(line)


Cache = dict[str, CacheEntry]


class CacheDocument(RootModel[dict[str, CacheEntry]]):
    """On-disk shape of ``cache.json``: absolute path -> CacheEntry."""


class ProjectCache(BaseModel):
    """Version-control roots discovered from a project descriptor.

    Keyed by the descriptor's modification timestamp so the descriptor is only
    re-parsed when it changes.
    """

    project_modified: int
    git_root_folders: list[str]
