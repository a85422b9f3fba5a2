"""Graph builder — breadth-first, depth-bounded expansion from a metadata provider."""

from __future__ import annotations

import logging
from collections import deque
from typing import Awaitable, Protocol

from dep_visualizer.models import PackageMeta
from dep_visualizer.graph.graph_models import DependencyGraph

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    def resolve(self, name: str, version: str | None = None) -> Awaitable[PackageMeta | None]: ...


class GraphBuilder:
    """Populate a DependencyGraph by repeatedly querying a provider.

    Only the root may be pinned to a version; every child is resolved to its
    own default (latest) version.
    """

    def __init__(self, provider: MetadataProvider):
        self.provider = provider
        self.visited: set[tuple[str, str]] = set()

    async def build(self, root: str, version: str | None = None, max_depth: int = 100) -> DependencyGraph:
        """Return the graph reachable from ``root``; empty if the root itself is unavailable."""
        graph = DependencyGraph()
        self.visited = set()
        queue: deque[tuple[str, str | None, int]] = deque([(root, version, 0)])

        while queue:
            name, pinned, depth = queue.popleft()
            if depth > max_depth:
                continue
            key = (name, pinned or "latest")
            if key in self.visited:
                continue
            self.visited.add(key)
            if name in graph:
                # first resolution of a name wins (a pinned root stays pinned)
                continue

            meta = await self.provider.resolve(name, pinned)
            if meta is None:
                if depth == 0:
                    logger.warning("Root package %s could not be resolved", name)
                    return DependencyGraph()
                graph.mark_unresolved(name)
                continue

            graph.add_package(name, meta.dependencies, meta.resolved_version)
            for dep in meta.dependencies:
                if dep:
                    queue.append((dep, None, depth + 1))

        logger.info("Built graph for %s: %d packages, %d fetch keys", root, len(graph), len(self.visited))
        return graph
