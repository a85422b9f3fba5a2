"""In-memory dependency graph: package name -> ordered direct dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class DependencyGraph:
    """Adjacency model for one analysis.

    A name missing from ``forward`` is unknown (never fetched or declared);
    a name mapped to an empty list is a confirmed leaf. Dependency lists may
    reference names that are not keys.
    """
    forward: dict[str, list[str]] = field(default_factory=dict)
    versions: dict[str, str] = field(default_factory=dict)  # name -> resolved version

    def add_package(self, name: str, dependencies: list[str], version: str | None = None) -> None:
        self.forward[name] = list(dependencies)
        if version:
            self.versions[name] = version

    def mark_unresolved(self, name: str) -> None:
        """Record a package whose metadata could not be fetched as a leaf."""
        self.forward.setdefault(name, [])

    def children(self, name: str) -> list[str] | None:
        return self.forward.get(name)

    def edges(self) -> Iterator[tuple[str, str]]:
        for parent, deps in self.forward.items():
            for child in deps:
                yield parent, child

    def __contains__(self, name: object) -> bool:
        return name in self.forward

    def __len__(self) -> int:
        return len(self.forward)

    def __iter__(self) -> Iterator[str]:
        return iter(self.forward)

    @classmethod
    def from_mapping(cls, mapping: dict[str, list[str]]) -> DependencyGraph:
        graph = cls()
        for name, deps in mapping.items():
            graph.add_package(name, deps)
        return graph
