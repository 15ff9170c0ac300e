# src/graph/descriptor.py — v1
"""Project descriptor loading and version-control root discovery."""

from __future__ import annotations

import json
import logging
import plistlib
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from incrlint.config.settings import Settings
from incrlint.core.errors import DescriptorDecodeError
from incrlint.graph.project_graph import NodeKind, ProjectGraph

logger = logging.getLogger(__name__)


def load_descriptor(path: Path) -> dict[str, Any]:
    """Decode a project descriptor and return its ``objects`` mapping.

    JSON documents and XML or binary property lists are accepted. Old-style
    ASCII descriptors have to be converted beforehand
    (``plutil -convert json project.pbxproj``).

    Raises:
        DescriptorDecodeError: If the file is unreadable, undecodable or has
            no ``objects`` mapping.
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise DescriptorDecodeError(f"Cannot read project descriptor {path}: {e}") from e

    document: Any
    if raw.lstrip().startswith(b"{"):
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DescriptorDecodeError(f"Invalid JSON descriptor {path}: {e}") from e
    else:
        try:
            document = plistlib.loads(raw)
        except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
            raise DescriptorDecodeError(
                f"Unsupported descriptor format {path}: {e}"
            ) from e

    objects = document.get("objects") if isinstance(document, dict) else None
    if not isinstance(objects, dict):
        raise DescriptorDecodeError(f"No objects in project descriptor {path}")
    return objects


def load_project_graph(settings: Settings) -> ProjectGraph:
    """Load the graph of the project named by ``settings``.

    Raises:
        DescriptorDecodeError: If the descriptor cannot be decoded.
    """
    descriptor = settings.pbxproj_path
    if descriptor is None:
        raise DescriptorDecodeError("PROJECT_FILE_PATH is not configured")
    objects = load_descriptor(descriptor)
    return ProjectGraph.from_objects(
        objects,
        project_dir=settings.project_dir,
        max_depth=settings.max_graph_depth,
    )


def discover_git_roots(graph: ProjectGraph, repo_root: Path | None) -> list[str]:
    """Directories referenced by the project that are git checkouts.

    Every file reference pointing at a directory with a ``.git`` entry is a
    root (e.g. a locally checked-out package), followed by ``repo_root``.
    """
    roots: list[str] = []
    for node in graph.nodes(NodeKind.FILE_REFERENCE):
        path = graph.absolute_path_of(node.key)
        if path.is_dir() and (path / ".git").exists():
            roots.append(str(path))
    if repo_root is not None:
        roots.append(str(repo_root))

    unique = list(dict.fromkeys(roots))
    logger.info("Found %d git roots", len(unique))
    return unique
