"""Data models for the dependency visualizer."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from dep_visualizer.errors import ConfigurationError

DEFAULT_MAX_DEPTH = 100
MAX_DEPTH_LIMIT = 1000

_PACKAGE_RE = re.compile(r"^[@a-zA-Z0-9\-_/.]+$")
_VERSION_RE = re.compile(r"^[a-zA-Z0-9.\-_]+$")


class Mode(enum.Enum):
    FILE = "file"
    LIVE = "live"


class OutputStyle(enum.Enum):
    TREE = "tree"
    FLAT = "flat"
    ORDER = "order"


class NodeStatus(enum.Enum):
    ROOT = "root"
    EXPANDED = "expanded"
    IGNORED = "ignored"
    TRUNCATED = "truncated"
    UNRESOLVED = "unresolved"
    CYCLE = "cycle"
    VISITED = "visited"


@dataclass
class PackageMeta:
    """What a metadata provider knows about one resolved package."""
    name: str
    resolved_version: str
    dependencies: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BranchTrail:
    """Sibling flags from a line up to the root, shared between descendants."""
    more: bool  # more siblings follow at this level
    up: BranchTrail | None = None

    def flags(self) -> tuple[bool, ...]:
        out: list[bool] = []
        node: BranchTrail | None = self
        while node is not None:
            out.append(node.more)
            node = node.up
        return tuple(reversed(out))


@dataclass
class TraversalEvent:
    """One emitted position of the tree walk."""
    name: str
    parent: str | None
    depth: int
    status: NodeStatus
    trail: BranchTrail | None = None

    @property
    def branches(self) -> tuple[bool, ...]:
        return self.trail.flags() if self.trail else ()


@dataclass
class FlatEdge:
    parent: str
    child: str
    depth: int
    status: NodeStatus = NodeStatus.EXPANDED


@dataclass
class LoadOrder:
    """Result of the cycle-aware topological sort."""
    order: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    reachable: list[str] = field(default_factory=list)

    @property
    def cyclic_nodes(self) -> set[str]:
        return {name for cycle in self.cycles for name in cycle}

    @property
    def is_acyclic(self) -> bool:
        return not self.cycles


@dataclass
class AnalysisConfig:
    """Configuration for one analysis run."""
    package: str = ""
    mode: Mode = Mode.FILE
    version: str | None = None
    graph_file: Path | None = None
    registry_url: str | None = None
    max_depth: int = DEFAULT_MAX_DEPTH
    ignore_substring: str | None = None
    style: OutputStyle = OutputStyle.TREE
    dependencies_first: bool = False
    lazy: bool = True
    timeout: float | None = None

    def validate(self) -> None:
        """Raise ConfigurationError for anything that would make the run meaningless."""
        if not self.package:
            raise ConfigurationError("A package name is required")
        if not _PACKAGE_RE.match(self.package):
            raise ConfigurationError(f"Invalid package name: {self.package!r}")
        if self.version is not None and not _VERSION_RE.match(self.version):
            raise ConfigurationError(f"Invalid version: {self.version!r}")
        if not isinstance(self.max_depth, int) or not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ConfigurationError(
                f"Max depth must be an integer in [1..{MAX_DEPTH_LIMIT}], got {self.max_depth!r}"
            )
        if self.registry_url is not None:
            parsed = urlparse(self.registry_url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigurationError(f"Registry URL must be http or https: {self.registry_url!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")

        if self.mode == Mode.FILE:
            if self.graph_file is None:
                raise ConfigurationError("File mode needs a graph file")
            if not self.graph_file.exists():
                raise ConfigurationError(f"Graph file not found: {self.graph_file}")
            if not self.graph_file.is_file():
                raise ConfigurationError(f"Graph file must be a file, not a directory: {self.graph_file}")


@dataclass
class AnalysisReport:
    """Everything the CLI needs to print for one run."""
    package: str
    style: OutputStyle
    resolved_version: str | None = None
    package_count: int = 0
    lines: list[str] = field(default_factory=list)
    edges: list[FlatEdge] = field(default_factory=list)
    load_order: LoadOrder | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.edges and self.load_order is None
