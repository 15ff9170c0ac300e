# src/cache/project_cache.py — v1
"""Project-level cache of version-control roots.

Parsing the project descriptor is the slowest part of standalone mode, so
the discovered roots are stored next to the run state and reused for as long
as the descriptor's modification timestamp is unchanged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from incrlint.cache.models import ProjectCache

logger = logging.getLogger(__name__)

PROJECT_CACHE_FILENAME = "project_cache.json"


def load_project_cache(work_directory: Path) -> ProjectCache | None:
    """Return the stored project cache, or None if missing or unreadable."""
    path = Path(work_directory) / PROJECT_CACHE_FILENAME
    try:
        return ProjectCache.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable project cache %s: %s", path, e)
        return None


def save_project_cache(work_directory: Path, cache: ProjectCache) -> None:
    path = Path(work_directory) / PROJECT_CACHE_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(cache.model_dump_json(indent=2), encoding="utf-8")
    os.replace(tmp, path)


def cached_git_roots(
    work_directory: Path,
    descriptor_path: Path,
    discover: Callable[[], list[str]],
) -> list[str]:
    """Return git roots for ``descriptor_path``, calling ``discover`` on a miss.

    Raises:
        OSError: If the descriptor cannot be stat'ed.
    """
    project_modified = os.stat(descriptor_path).st_mtime_ns
    cached = load_project_cache(work_directory)
    if cached is not None and cached.project_modified == project_modified:
        logger.debug("Reusing %d cached git roots", len(cached.git_root_folders))
        return cached.git_root_folders

    roots = discover()
    save_project_cache(
        work_directory,
        ProjectCache(project_modified=project_modified, git_root_folders=roots),
    )
    return roots
