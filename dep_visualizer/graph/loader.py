"""Graph file loader — one ``name: dep1 dep2`` declaration per line."""

from __future__ import annotations

import logging
from pathlib import Path

from dep_visualizer.errors import ConfigurationError
from dep_visualizer.graph.graph_models import DependencyGraph

logger = logging.getLogger(__name__)

EXAMPLE_GRAPH = """\
A: B C
B: D E
C: D F
D:
E: A
F: G
G: H
H: F
I: J K
J: L
K: M
L:
M:
"""


def parse_graph_text(text: str) -> DependencyGraph:
    """Parse graph file contents.

    A trailing colon with nothing after it declares a confirmed leaf; blank
    lines are skipped. Only the first colon separates the name, so scoped or
    odd names keep any later colons in the dependency part.
    """
    graph = DependencyGraph()
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue

        name, sep, rest = line.partition(":")
        name = name.strip()
        if not name:
            logger.warning("Line %d has no package name, skipping: %r", line_no, raw)
            continue
        if not sep:
            logger.debug("Line %d has no colon, treating %s as a leaf", line_no, name)

        if name in graph:
            logger.warning("Package %s declared again on line %d, replacing", name, line_no)
        graph.add_package(name, rest.split())

    return graph


def load_graph_file(path: Path) -> DependencyGraph:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read graph file {path}: {e}") from e

    graph = parse_graph_text(text)
    logger.info("Loaded graph from %s: %d packages", path, len(graph))
    return graph


def write_example_graph(path: Path) -> Path:
    """Write the multi-cycle example graph (two cycles, one shared leaf)."""
    path.write_text(EXAMPLE_GRAPH, encoding="utf-8")
    return path
