"""Tests for the iterative tree traverser — markers, prefixes, depth bound, lazy sources."""

import asyncio
from collections import Counter
from pathlib import Path

from dep_visualizer.graph import (
    ChildSource,
    DependencyGraph,
    GraphChildSource,
    RegistryChildSource,
    TreeTraverser,
    flat_edges,
    load_graph_file,
    render_tree,
)
from dep_visualizer.graph.render import format_flat_line, tree_prefix
from dep_visualizer.models import NodeStatus, PackageMeta

FIXTURES = Path(__file__).parent / "fixtures"


# ── Helpers ───────────────────────────────────────────────────

def _example():
    return load_graph_file(FIXTURES / "complex_graph.txt")


def _diamond():
    return load_graph_file(FIXTURES / "diamond_graph.txt")


def _walk(graph, start, **kwargs):
    traverser = TreeTraverser(GraphChildSource(graph), **kwargs)
    return asyncio.run(traverser.walk(start))


class _FakeProvider:
    def __init__(self, packages, failing=()):
        self.packages = packages
        self.failing = set(failing)
        self.calls = []

    async def resolve(self, name, version=None):
        self.calls.append((name, version))
        if name in self.failing or name not in self.packages:
            return None
        return PackageMeta(name=name, resolved_version=version or "1.0.0",
                           dependencies=list(self.packages[name]))


class _ExplodingSource(ChildSource):
    def __init__(self, graph, broken):
        self.graph = graph
        self.broken = broken

    async def children(self, name):
        if name == self.broken:
            raise ConnectionError("registry went away")
        return self.graph.children(name)


# ── Prefix helpers ────────────────────────────────────────────

class TestPrefix:
    def test_root_has_no_prefix(self):
        assert tree_prefix(()) == ""

    def test_connectors(self):
        assert tree_prefix((True,)) == "├── "
        assert tree_prefix((False,)) == "└── "
        assert tree_prefix((True, False)) == "│   └── "
        assert tree_prefix((False, True)) == "    ├── "


# ── Materialized graph rendering ─────────────────────────────

class TestRenderTree:
    def test_example_tree(self):
        assert render_tree(_example(), "A") == [
            "A",
            "├── B",
            "│   ├── D",
            "│   └── E",
            "│       └── A (cyclic dependency)",
            "└── C",
            "    ├── D (already processed)",
            "    └── F",
            "        └── G",
            "            └── H",
            "                └── F (cyclic dependency)",
        ]

    def test_output_is_stable(self):
        assert render_tree(_example(), "A") == render_tree(_example(), "A")

    def test_unresolved_and_ignored_markers(self):
        assert render_tree(_diamond(), "app") == [
            "app",
            "├── core",
            "│   ├── utils",
            "│   └── logger",
            "├── utils (already processed)",
            "└── test-helpers",
            "    └── mocha (unresolved)",
        ]
        assert render_tree(_diamond(), "app", ignore_substring="test") == [
            "app",
            "├── core",
            "│   ├── utils",
            "│   └── logger",
            "├── utils (already processed)",
            "└── test-helpers [ignored]",
        ]

    def test_unmatched_filter_changes_nothing(self):
        assert render_tree(_example(), "A", ignore_substring="zzz") == render_tree(_example(), "A")

    def test_self_loop(self):
        graph = DependencyGraph.from_mapping({"A": ["A"]})
        assert render_tree(graph, "A") == ["A", "└── A (cyclic dependency)"]

    def test_unknown_start(self):
        assert render_tree(_example(), "nope") == ["nope (unresolved)"]


# ── Depth bound ───────────────────────────────────────────────

class TestDepthBound:
    def test_depth_one(self):
        assert render_tree(_example(), "A", max_depth=1) == [
            "A",
            "├── B",
            "│   └── ... (max depth reached)",
            "└── C",
            "    └── ... (max depth reached)",
        ]

    def test_depth_two(self):
        assert render_tree(_example(), "A", max_depth=2) == [
            "A",
            "├── B",
            "│   ├── D",
            "│   └── E",
            "│       └── ... (max depth reached)",
            "└── C",
            "    ├── D (already processed)",
            "    └── F",
            "        └── ... (max depth reached)",
        ]

    def test_depth_zero_truncates_root(self):
        assert render_tree(_example(), "A", max_depth=0) == ["A", "└── ... (max depth reached)"]

    def test_no_node_beyond_bound(self):
        for bound in range(1, 6):
            for event in _walk(_example(), "A", max_depth=bound):
                if event.status is NodeStatus.TRUNCATED:
                    assert event.depth == bound + 1
                else:
                    assert event.depth <= bound

    def test_single_marker_per_truncated_node(self):
        events = _walk(_example(), "A", max_depth=1)
        markers = [e.parent for e in events if e.status is NodeStatus.TRUNCATED]
        assert markers == ["B", "C"]

    def test_leaf_at_bound_has_no_marker(self):
        graph = DependencyGraph.from_mapping({"A": ["B"], "B": []})
        assert render_tree(graph, "A", max_depth=1) == ["A", "└── B"]

    def test_truncated_node_expands_when_met_shallower(self):
        # X is first met at the bound via A -> B -> X, later directly under A
        graph = DependencyGraph.from_mapping({"A": ["B", "X"], "B": ["X"], "X": ["Y"], "Y": []})
        assert render_tree(graph, "A", max_depth=2) == [
            "A",
            "├── B",
            "│   └── X",
            "│       └── ... (max depth reached)",
            "└── X",
            "    └── Y",
        ]


# ── Traversal invariants ──────────────────────────────────────

class TestInvariants:
    def test_each_node_expanded_once(self):
        for graph, start in ((_example(), "A"), (_diamond(), "app"), (_example(), "I")):
            events = _walk(graph, start)
            expanded = Counter(e.name for e in events if e.status is NodeStatus.EXPANDED)
            assert all(count == 1 for count in expanded.values())

    def test_shared_dependency_marked_processed(self):
        events = _walk(_example(), "A")
        d_events = [e for e in events if e.name == "D"]
        assert [e.status for e in d_events] == [NodeStatus.EXPANDED, NodeStatus.VISITED]
        assert [e.parent for e in d_events] == ["B", "C"]

    def test_back_edge_marked_cyclic(self):
        events = _walk(_example(), "A")
        back = [e for e in events if e.status is NodeStatus.CYCLE]
        assert [(e.parent, e.name) for e in back] == [("E", "A"), ("H", "F")]

    def test_deep_self_referential_chain(self):
        length = 10_000
        mapping = {f"n{i}": [f"n{i + 1}"] for i in range(length - 1)}
        mapping[f"n{length - 1}"] = ["n0"]
        edges = flat_edges(DependencyGraph.from_mapping(mapping), "n0", max_depth=length + 1)
        assert len(edges) == length
        last = edges[-1]
        assert (last.parent, last.child, last.depth) == (f"n{length - 1}", "n0", length)
        assert last.status is NodeStatus.CYCLE


# ── Flat edges ────────────────────────────────────────────────

class TestFlatEdges:
    def test_example_edges(self):
        edges = flat_edges(_example(), "A")
        assert [(e.parent, e.child, e.depth) for e in edges] == [
            ("A", "B", 1), ("B", "D", 2), ("B", "E", 2), ("E", "A", 3),
            ("A", "C", 1), ("C", "D", 2), ("C", "F", 2), ("F", "G", 3),
            ("G", "H", 4), ("H", "F", 5),
        ]

    def test_flat_lines(self):
        edges = flat_edges(_diamond(), "app", ignore_substring="test")
        assert [format_flat_line(e) for e in edges] == [
            "app -> core",
            "  core -> utils",
            "  core -> logger",
            "app -> utils (already processed)",
            "app -> test-helpers [ignored]",
        ]

    def test_truncation_edge(self):
        edges = flat_edges(_example(), "A", max_depth=1)
        assert format_flat_line(edges[1]) == "  B -> ... (max depth reached)"


# ── Lazy sources ──────────────────────────────────────────────

class TestLazyTraversal:
    def test_same_output_as_materialized(self):
        graph = _example()
        provider = _FakeProvider(graph.forward)
        source = RegistryChildSource(provider, "A")
        lines = asyncio.run(TreeTraverser(source).render("A"))
        assert lines == render_tree(graph, "A")

    def test_only_root_is_pinned(self):
        provider = _FakeProvider({"A": ["B"], "B": ["A"]})
        source = RegistryChildSource(provider, "A", "2.0.0")
        asyncio.run(TreeTraverser(source).render("A"))
        assert ("A", "2.0.0") in provider.calls
        assert all(version is None for name, version in provider.calls if name != "A")
        assert source.resolved_versions == {"A": "2.0.0", "B": "1.0.0"}

    def test_unavailable_child_rendered_unresolved(self):
        provider = _FakeProvider({"A": ["B", "C"], "B": [], "C": []}, failing={"B"})
        lines = asyncio.run(TreeTraverser(RegistryChildSource(provider, "A")).render("A"))
        assert lines == ["A", "├── B (unresolved)", "└── C"]

    def test_source_exception_does_not_halt_walk(self):
        graph = DependencyGraph.from_mapping({"A": ["B", "C"], "B": ["D"], "C": [], "D": []})
        traverser = TreeTraverser(_ExplodingSource(graph, "B"))
        lines = asyncio.run(traverser.render("A"))
        assert lines == ["A", "├── B (unresolved)", "└── C"]

    def test_ignored_child_never_fetched(self):
        provider = _FakeProvider({"A": ["B", "skip-me"], "B": [], "skip-me": []})
        traverser = TreeTraverser(RegistryChildSource(provider, "A"), ignore_substring="skip")
        asyncio.run(traverser.render("A"))
        assert "skip-me" not in [name for name, _ in provider.calls]
