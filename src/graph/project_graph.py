# src/graph/project_graph.py — v1
"""Project graph: resolves file paths from an IDE project descriptor.

The descriptor's object graph is held as a forest in a NetworkX DiGraph with
one edge per node pointing from child to parent. Paths are resolved by
walking parent edges and are memoized per key, so resolving every leaf costs
O(nodes) overall instead of O(nodes x depth).
"""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import networkx as nx
from pydantic import BaseModel, ConfigDict

from incrlint.core.errors import ProjectGraphCycleError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256


class NodeKind(str, Enum):
    """Descriptor object kinds that take part in path resolution."""

    GROUP = "group"
    VARIANT_GROUP = "variant_group"
    FILE_REFERENCE = "file_reference"

    @classmethod
    def from_isa(cls, isa: str) -> NodeKind | None:
        return _ISA_KINDS.get(isa)


_ISA_KINDS: dict[str, NodeKind] = {
    "PBXGroup": NodeKind.GROUP,
    "PBXVariantGroup": NodeKind.VARIANT_GROUP,
    "PBXFileReference": NodeKind.FILE_REFERENCE,
}


class ProjectGraphNode(BaseModel):
    """One group, variant group or file reference of the descriptor."""

    model_config = ConfigDict(frozen=True)

    key: str
    kind: NodeKind
    name: str
    parent_key: str | None = None


class ProjectGraph:
    """Flat index of descriptor nodes with memoized path resolution."""

    def __init__(
        self,
        nodes: Iterable[ProjectGraphNode],
        project_dir: Path | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._graph = nx.DiGraph()
        self._project_dir = project_dir
        self._max_depth = max_depth
        self._path_cache: dict[str, str] = {}

        node_list = list(nodes)
        for node in node_list:
            self._graph.add_node(node.key, node=node)
        for node in node_list:
            # A parent missing from the graph leaves the node as a root.
            if node.parent_key is not None and node.parent_key in self._graph:
                self._graph.add_edge(node.key, node.parent_key)

    @classmethod
    def from_objects(
        cls,
        objects: Mapping[str, Any],
        project_dir: Path | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> ProjectGraph:
        """Build a graph from a descriptor's ``objects`` mapping.

        Groups without a ``path`` are kept with an empty name so that their
        children still reach the groups above them. File references without
        a ``path`` and all other object kinds are not indexed.
        """
        parents: dict[str, str] = {}
        indexed: dict[str, tuple[NodeKind, str]] = {}

        for key, obj in objects.items():
            if not isinstance(obj, Mapping):
                continue
            kind = NodeKind.from_isa(str(obj.get("isa", "")))
            if kind is None:
                continue
            path = obj.get("path")
            if not isinstance(path, str):
                if kind == NodeKind.FILE_REFERENCE:
                    continue
                path = ""
            indexed[key] = (kind, path)

            children = obj.get("children")
            if isinstance(children, list):
                for child in children:
                    parents[str(child)] = key

        nodes = [
            ProjectGraphNode(
                key=key, kind=kind, name=name, parent_key=parents.get(key),
            )
            for key, (kind, name) in indexed.items()
        ]
        logger.debug("Indexed %d of %d descriptor objects", len(nodes), len(objects))
        return cls(nodes, project_dir=project_dir, max_depth=max_depth)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, key: object) -> bool:
        return key in self._graph

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def node(self, key: str) -> ProjectGraphNode:
        """Return the node for ``key``. Raises KeyError for unknown keys."""
        return self._graph.nodes[key]["node"]

    def nodes(self, kind: NodeKind | None = None) -> list[ProjectGraphNode]:
        return [
            data["node"]
            for _, data in self._graph.nodes(data=True)
            if kind is None or data["node"].kind == kind
        ]

    def parent_of(self, key: str) -> str | None:
        for parent in self._graph.successors(key):
            return parent
        return None

    def roots(self) -> list[str]:
        return [key for key, degree in self._graph.out_degree() if degree == 0]

    def path_of(self, key: str) -> str:
        """Path of ``key`` relative to its root, joined with ``/``.

        An absolute name anchors the path: nothing above it is joined.

        Raises:
            KeyError: If ``key`` is not in the graph.
            ProjectGraphCycleError: If the parent chain loops or exceeds the
                configured depth.
        """
        cached = self._path_cache.get(key)
        if cached is not None:
            return cached
        if key not in self._graph:
            raise KeyError(key)

        chain: list[str] = []
        seen: set[str] = set()
        base = ""
        current: str | None = key
        while current is not None:
            resolved = self._path_cache.get(current)
            if resolved is not None:
                base = resolved
                break
            if current in seen:
                raise ProjectGraphCycleError(key, [*chain, current])
            if len(chain) >= self._max_depth:
                raise ProjectGraphCycleError(key, [*chain[:3], "...", current])
            seen.add(current)
            chain.append(current)
            if os.path.isabs(self.node(current).name):
                break
            current = self.parent_of(current)

        for chain_key in reversed(chain):
            name = self.node(chain_key).name
            if os.path.isabs(name):
                path = name
            elif not name:
                path = base
            elif base:
                path = posixpath.join(base, name)
            else:
                path = name
            self._path_cache[chain_key] = path
            base = path

        return self._path_cache[key]

    def absolute_path_of(self, key: str) -> Path:
        """Absolute filesystem path of ``key``.

        Names containing ``/`` are already project-relative (or absolute) and
        bypass the parent walk; relative results are anchored at the project
        directory.
        """
        name = self.node(key).name
        relative = name if "/" in name else self.path_of(key)
        path = Path(relative)
        if path.is_absolute() or self._project_dir is None:
            return path
        return self._project_dir / path
