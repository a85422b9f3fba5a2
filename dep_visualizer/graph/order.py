"""Load order — Kahn's algorithm over the reachable, filtered subgraph, plus cycle extraction."""

from __future__ import annotations

from collections import deque

from dep_visualizer.models import LoadOrder
from dep_visualizer.graph.graph_models import DependencyGraph


def is_ignored(name: str, ignore_substring: str | None) -> bool:
    return bool(ignore_substring) and ignore_substring in name


class OrderAnalyzer:
    """Cycle-aware topological ordering of everything reachable from a start package."""

    def __init__(self, ignore_substring: str | None = None, max_depth: int | None = None):
        self.ignore_substring = ignore_substring
        self.max_depth = max_depth

    def load_order(self, graph: DependencyGraph, start: str, dependencies_first: bool = False) -> LoadOrder:
        """Order the reachable subgraph and report its cycles.

        By default a package precedes its dependencies. With
        ``dependencies_first`` every dependency precedes its dependents
        (install order). Nodes left out of the order sit on or behind a
        cycle; the cycles among them are listed closed (first name repeated
        at the end).
        """
        reachable = self.reachable(graph, start)
        edges = self._edges(graph, reachable)

        successors: dict[str, list[str]] = {name: [] for name in reachable}
        indegree: dict[str, int] = {name: 0 for name in reachable}
        for parent, child in edges:
            if dependencies_first:
                parent, child = child, parent
            successors[parent].append(child)
            indegree[child] += 1

        ready = deque(name for name in reachable if indegree[name] == 0)
        order: list[str] = []
        while ready:
            name = ready.popleft()
            order.append(name)
            for succ in successors[name]:
                indegree[succ] -= 1
                if indegree[succ] == 0:
                    ready.append(succ)

        ordered = set(order)
        remaining = [name for name in reachable if name not in ordered]
        cycles = self._find_cycles(graph, remaining) if remaining else []

        return LoadOrder(order=order, cycles=cycles, reachable=list(reachable))

    def reachable(self, graph: DependencyGraph, start: str) -> dict[str, int]:
        """BFS from ``start``: name -> depth of first discovery, in discovery order.

        Edges into ignored names are dropped, so nothing behind them becomes
        reachable through them.
        """
        found: dict[str, int] = {}
        queue = deque([(start, 0)])
        while queue:
            name, depth = queue.popleft()
            if name in found:
                continue
            if self.max_depth is not None and depth > self.max_depth:
                continue
            found[name] = depth
            for dep in graph.children(name) or []:
                if is_ignored(dep, self.ignore_substring):
                    continue
                queue.append((dep, depth + 1))
        return found

    def _edges(self, graph: DependencyGraph, reachable: dict[str, int]) -> list[tuple[str, str]]:
        edges = []
        for parent in reachable:
            for child in graph.children(parent) or []:
                if child not in reachable or is_ignored(child, self.ignore_substring):
                    continue
                edges.append((parent, child))
        return edges

    def _find_cycles(self, graph: DependencyGraph, remaining: list[str]) -> list[list[str]]:
        """Iterative DFS over the unordered nodes only.

        Overlapping reports are kept when several back-edges share nodes.
        """
        allowed = set(remaining)
        cycles: list[list[str]] = []
        visited: set[str] = set()

        for root in remaining:
            if root in visited:
                continue
            visited.add(root)
            path = [root]
            on_path = {root}
            cursors = [0]

            while path:
                node = path[-1]
                deps = graph.children(node) or []
                if cursors[-1] >= len(deps):
                    on_path.discard(path.pop())
                    cursors.pop()
                    continue

                dep = deps[cursors[-1]]
                cursors[-1] += 1
                if dep not in allowed or is_ignored(dep, self.ignore_substring):
                    continue
                if dep in on_path:
                    cycles.append(path[path.index(dep):] + [dep])
                elif dep not in visited:
                    visited.add(dep)
                    path.append(dep)
                    on_path.add(dep)
                    cursors.append(0)

        return cycles


def load_order(
    graph: DependencyGraph,
    start: str,
    ignore_substring: str | None = None,
    max_depth: int | None = None,
    dependencies_first: bool = False,
) -> LoadOrder:
    analyzer = OrderAnalyzer(ignore_substring=ignore_substring, max_depth=max_depth)
    return analyzer.load_order(graph, start, dependencies_first=dependencies_first)
