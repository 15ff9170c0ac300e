# src/cache/base_cache_store.py — v2
"""Abstract cache store interface.

A store owns two committed artifacts (the per-file cache and the raw output
of the last lint pass) and their temporaries. Readers only ever observe the
committed pair; temporaries become visible through ``commit()`` alone.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from incrlint.cache.models import Cache


class BaseCacheStore(ABC):
    """Unified interface for incremental lint state backends."""

    @property
    @abstractmethod
    def output_temp_path(self) -> Path:
        """Where the lint command appends its captured output."""

    @property
    @abstractmethod
    def output_files_directory(self) -> Path:
        """Auxiliary directory declared as the commands' output location."""

    @abstractmethod
    def load(self) -> Cache:
        """Load the committed cache. Never raises; returns {} on failure."""

    @abstractmethod
    def load_prior_output(self, cache_non_empty: bool) -> str | None:
        """Load the last committed lint output.

        Returns "" without touching storage when ``cache_non_empty`` is False,
        and None when the output cannot be read.
        """

    @abstractmethod
    def prepare_output_directory(self) -> Path:
        """Create the output directory and drop orphaned temporaries."""

    @abstractmethod
    def stage(self, new_cache: Cache) -> None:
        """Write ``new_cache`` to its temporary location."""

    @abstractmethod
    def commit(self) -> None:
        """Atomically move staged temporaries over the committed artifacts."""

    @abstractmethod
    def write_committed(self, new_cache: Cache, output: str) -> None:
        """Atomically replace both committed artifacts in one step."""

    @abstractmethod
    def clear(self) -> None:
        """Remove the committed artifacts."""

    def load_state(self) -> tuple[Cache, str]:
        """Load cache and prior output together.

        A non-empty cache whose output cannot be read is discarded: stale
        diagnostics without their output are not trusted.
        """
        cache = self.load()
        prior_output = self.load_prior_output(bool(cache))
        if prior_output is None:
            return {}, ""
        return cache, prior_output
