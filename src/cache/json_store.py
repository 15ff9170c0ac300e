# src/cache/json_store.py — v2
"""JSON file-based cache store.

Layout inside the working directory::

    cache.json        committed per-file cache
    output.txt        committed raw output of the last lint pass
    cache.json.tmp    staged cache, renamed over cache.json on commit
    output.txt.tmp    lint output of the current pass
    Output/           empty directory declared as the commands' output

Commit removes the committed cache, renames the output, then renames the
cache. A commit interrupted part way leaves no cache.json, which the next run
reads as an empty cache and answers with a full reprocessing pass.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from incrlint.cache.base_cache_store import BaseCacheStore
from incrlint.cache.models import Cache, CacheDocument

logger = logging.getLogger(__name__)

CACHE_FILENAME = "cache.json"
OUTPUT_FILENAME = "output.txt"
OUTPUT_DIRECTORY = "Output"
TEMP_SUFFIX = ".tmp"


class JsonCacheStore(BaseCacheStore):
    """Cache store backed by two files in a working directory."""

    def __init__(self, work_directory: Path) -> None:
        self._root = Path(work_directory).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def work_directory(self) -> Path:
        return self._root

    @property
    def cache_path(self) -> Path:
        return self._root / CACHE_FILENAME

    @property
    def output_path(self) -> Path:
        return self._root / OUTPUT_FILENAME

    @property
    def cache_temp_path(self) -> Path:
        return self._root / (CACHE_FILENAME + TEMP_SUFFIX)

    @property
    def output_temp_path(self) -> Path:
        return self._root / (OUTPUT_FILENAME + TEMP_SUFFIX)

    @property
    def output_files_directory(self) -> Path:
        return self._root / OUTPUT_DIRECTORY

    def load(self) -> Cache:
        """Load ``cache.json``; a missing or corrupt file yields an empty cache."""
        try:
            raw = self.cache_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read cache %s: %s", self.cache_path, e)
            return {}

        try:
            return dict(CacheDocument.model_validate_json(raw).root)
        except ValidationError as e:
            logger.warning(
                "Discarding corrupt cache %s (%d errors)",
                self.cache_path, e.error_count(),
            )
            return {}

    def load_prior_output(self, cache_non_empty: bool) -> str | None:
        if not cache_non_empty:
            return ""
        try:
            return self.output_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "No readable diagnostics at %s (%s), resetting cache",
                self.output_path, e,
            )
            return None

    def prepare_output_directory(self) -> Path:
        self.output_files_directory.mkdir(parents=True, exist_ok=True)
        self.cache_temp_path.unlink(missing_ok=True)
        self.output_temp_path.unlink(missing_ok=True)
        return self.output_files_directory

    def stage(self, new_cache: Cache) -> None:
        self.cache_temp_path.write_text(_dump(new_cache), encoding="utf-8")

    def commit(self) -> None:
        if not self.cache_temp_path.exists():
            raise FileNotFoundError(
                f"Nothing staged to commit: {self.cache_temp_path} is missing"
            )
        # The lint pass may legitimately produce no output at all.
        if not self.output_temp_path.exists():
            self.output_temp_path.write_text("", encoding="utf-8")
        # A new output must never be read against the previous cache.
        self.cache_path.unlink(missing_ok=True)
        os.replace(self.output_temp_path, self.output_path)
        os.replace(self.cache_temp_path, self.cache_path)
        logger.debug("Committed %s and %s", self.output_path, self.cache_path)

    def write_committed(self, new_cache: Cache, output: str) -> None:
        self.output_temp_path.write_text(output, encoding="utf-8")
        self.stage(new_cache)
        self.commit()

    def clear(self) -> None:
        self.cache_path.unlink(missing_ok=True)
        self.output_path.unlink(missing_ok=True)


def _dump(cache: Cache) -> str:
    return CacheDocument(cache).model_dump_json(indent=2)
