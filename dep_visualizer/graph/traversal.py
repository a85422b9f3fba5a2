"""Tree traverser — iterative pre-order walk with cycle and shared-subtree markers.

The walk never recurses: an explicit stack of frames (node, children,
cursor, depth, sibling trail) keeps arbitrarily long dependency chains off
the call stack. Two sets drive the markers:

* ``path``: names on the current root-to-node path. Meeting one again is a
  back-edge, rendered as a cyclic dependency and never expanded.
* ``done``: names whose subtree has been fully rendered once. Meeting one
  again off the path is rendered as already processed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from dep_visualizer.models import BranchTrail, FlatEdge, NodeStatus, TraversalEvent
from dep_visualizer.graph.graph_models import DependencyGraph
from dep_visualizer.graph.order import is_ignored
from dep_visualizer.graph.render import TRUNCATION_NAME, format_tree_line
from dep_visualizer.graph.sources import ChildSource, GraphChildSource

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    name: str
    children: list[str]
    depth: int
    trail: BranchTrail | None
    cursor: int = 0


class TreeTraverser:
    """Walk the dependency tree of a package over any ChildSource."""

    def __init__(self, source: ChildSource, max_depth: int = 100, ignore_substring: str | None = None):
        self.source = source
        self.max_depth = max_depth
        self.ignore_substring = ignore_substring

    async def walk(self, start: str) -> list[TraversalEvent]:
        events: list[TraversalEvent] = []
        path: set[str] = set()
        done: set[str] = set()

        root_children = await self._expand(start)
        if root_children is None:
            events.append(TraversalEvent(start, None, 0, NodeStatus.UNRESOLVED))
            return events

        events.append(TraversalEvent(start, None, 0, NodeStatus.ROOT))
        path.add(start)
        stack = [_Frame(start, root_children, 0, None)]

        while stack:
            frame = stack[-1]

            # Children of a node at the depth bound collapse into one marker.
            # Its subtree was not rendered, so it does not count as done.
            if frame.depth >= self.max_depth and frame.children:
                events.append(TraversalEvent(
                    TRUNCATION_NAME, frame.name, frame.depth + 1,
                    NodeStatus.TRUNCATED, BranchTrail(False, frame.trail),
                ))
                stack.pop()
                path.discard(frame.name)
                continue

            if frame.cursor >= len(frame.children):
                stack.pop()
                path.discard(frame.name)
                done.add(frame.name)
                continue

            child = frame.children[frame.cursor]
            frame.cursor += 1
            depth = frame.depth + 1
            trail = BranchTrail(frame.cursor < len(frame.children), frame.trail)

            status = self._classify(child, path, done)
            if status is not NodeStatus.EXPANDED:
                events.append(TraversalEvent(child, frame.name, depth, status, trail))
                continue

            grandchildren = await self._expand(child)
            if grandchildren is None:
                events.append(TraversalEvent(child, frame.name, depth, NodeStatus.UNRESOLVED, trail))
                continue

            events.append(TraversalEvent(child, frame.name, depth, NodeStatus.EXPANDED, trail))
            path.add(child)
            stack.append(_Frame(child, grandchildren, depth, trail))

        return events

    def _classify(self, child: str, path: set[str], done: set[str]) -> NodeStatus:
        if is_ignored(child, self.ignore_substring):
            return NodeStatus.IGNORED
        # Ancestors and finished nodes have been expanded, so they are resolved.
        if child in path:
            return NodeStatus.CYCLE
        if child in done:
            return NodeStatus.VISITED
        return NodeStatus.EXPANDED

    async def _expand(self, name: str) -> list[str] | None:
        try:
            return await self.source.children(name)
        except Exception as e:
            logger.warning("Expanding %s failed: %s", name, e)
            return None

    async def render(self, start: str) -> list[str]:
        return [format_tree_line(event) for event in await self.walk(start)]

    async def edges(self, start: str) -> list[FlatEdge]:
        return [
            FlatEdge(parent=event.parent, child=event.name, depth=event.depth, status=event.status)
            for event in await self.walk(start)
            if event.parent is not None
        ]


def render_tree(
    graph: DependencyGraph,
    start: str,
    max_depth: int = 100,
    ignore_substring: str | None = None,
) -> list[str]:
    """Render a materialized graph as tree lines."""
    traverser = TreeTraverser(GraphChildSource(graph), max_depth, ignore_substring)
    return asyncio.run(traverser.render(start))


def flat_edges(
    graph: DependencyGraph,
    start: str,
    max_depth: int = 100,
    ignore_substring: str | None = None,
) -> list[FlatEdge]:
    """Parent -> child edges of a materialized graph, in walk order."""
    traverser = TreeTraverser(GraphChildSource(graph), max_depth, ignore_substring)
    return asyncio.run(traverser.edges(start))
