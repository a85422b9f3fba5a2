"""Child sources — where the traverser gets a node's dependencies from."""

from __future__ import annotations

import abc

from dep_visualizer.graph.builder import MetadataProvider
from dep_visualizer.graph.graph_models import DependencyGraph


class ChildSource(abc.ABC):
    """Answer "what does this package depend on?".

    ``None`` means the name is unknown or could not be resolved; an empty
    list is a confirmed leaf.
    """

    @abc.abstractmethod
    async def children(self, name: str) -> list[str] | None:
        """Return the direct dependency names of ``name``."""


class GraphChildSource(ChildSource):
    """Lookup over an already materialized graph."""

    def __init__(self, graph: DependencyGraph):
        self.graph = graph

    async def children(self, name: str) -> list[str] | None:
        return self.graph.children(name)


class RegistryChildSource(ChildSource):
    """Lazy expansion through a metadata provider; only the root is pinned."""

    def __init__(self, provider: MetadataProvider, root: str, root_version: str | None = None):
        self.provider = provider
        self.root = root
        self.root_version = root_version
        self.resolved_versions: dict[str, str] = {}

    async def children(self, name: str) -> list[str] | None:
        version = self.root_version if name == self.root else None
        meta = await self.provider.resolve(name, version)
        if meta is None:
            return None
        self.resolved_versions.setdefault(name, meta.resolved_version)
        return meta.dependencies
