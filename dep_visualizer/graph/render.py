"""Line formatting for tree and flat output."""

from __future__ import annotations

from dep_visualizer.models import FlatEdge, NodeStatus, TraversalEvent

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
BLANK = "    "

TRUNCATION_NAME = "..."

MARKERS: dict[NodeStatus, str] = {
    NodeStatus.IGNORED: "[ignored]",
    NodeStatus.TRUNCATED: "(max depth reached)",
    NodeStatus.UNRESOLVED: "(unresolved)",
    NodeStatus.CYCLE: "(cyclic dependency)",
    NodeStatus.VISITED: "(already processed)",
}


def tree_prefix(branches: tuple[bool, ...]) -> str:
    """Connector columns for a line whose ancestors have the given sibling flags.

    ``branches[i]`` tells whether more siblings follow at level ``i + 1``;
    the last flag belongs to the line itself.
    """
    if not branches:
        return ""
    columns = "".join(PIPE if more else BLANK for more in branches[:-1])
    return columns + (BRANCH if branches[-1] else LAST_BRANCH)


def label(name: str, status: NodeStatus) -> str:
    marker = MARKERS.get(status)
    return f"{name} {marker}" if marker else name


def format_tree_line(event: TraversalEvent) -> str:
    return tree_prefix(event.branches) + label(event.name, event.status)


def format_flat_line(edge: FlatEdge) -> str:
    indent = "  " * max(edge.depth - 1, 0)
    return f"{indent}{edge.parent} -> {label(edge.child, edge.status)}"
