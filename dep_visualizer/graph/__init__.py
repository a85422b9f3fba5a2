"""Dependency-graph engine: store, builder, load order and tree traversal."""

from dep_visualizer.graph.graph_models import DependencyGraph
from dep_visualizer.graph.loader import load_graph_file, parse_graph_text, write_example_graph
from dep_visualizer.graph.builder import GraphBuilder, MetadataProvider
from dep_visualizer.graph.order import OrderAnalyzer, load_order
from dep_visualizer.graph.sources import ChildSource, GraphChildSource, RegistryChildSource
from dep_visualizer.graph.traversal import TreeTraverser, flat_edges, render_tree

__all__ = [
    "ChildSource",
    "DependencyGraph",
    "GraphBuilder",
    "GraphChildSource",
    "MetadataProvider",
    "OrderAnalyzer",
    "RegistryChildSource",
    "TreeTraverser",
    "flat_edges",
    "load_graph_file",
    "load_order",
    "parse_graph_text",
    "render_tree",
    "write_example_graph",
]
