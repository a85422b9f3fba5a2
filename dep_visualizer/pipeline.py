"""Analysis orchestrator: config -> graph source -> tree, flat edges or load order."""

from __future__ import annotations

import asyncio
import logging

from dep_visualizer.errors import ConfigurationError
from dep_visualizer.models import AnalysisConfig, AnalysisReport, Mode, OutputStyle
from dep_visualizer.graph import (
    ChildSource,
    DependencyGraph,
    GraphBuilder,
    GraphChildSource,
    MetadataProvider,
    RegistryChildSource,
    TreeTraverser,
    load_graph_file,
    load_order,
)
from dep_visualizer.graph.render import format_flat_line
from dep_visualizer.registry import NpmRegistryProvider, RegistryConfig

logger = logging.getLogger(__name__)


def make_provider(config: AnalysisConfig) -> NpmRegistryProvider:
    registry_config = RegistryConfig(
        base_url=config.registry_url or "",
        timeout=config.timeout or 0.0,
    )
    return NpmRegistryProvider(registry_config)


async def analyze(config: AnalysisConfig, provider: MetadataProvider | None = None) -> AnalysisReport:
    """Run one analysis. Raises ConfigurationError before doing any graph work."""
    config.validate()
    report = AnalysisReport(package=config.package, style=config.style)

    if config.mode == Mode.FILE:
        graph = load_graph_file(config.graph_file)
        if config.package not in graph:
            raise ConfigurationError(f"Package {config.package!r} not found in {config.graph_file}")
        report.package_count = len(graph)
        await _fill_report(report, config, GraphChildSource(graph), graph)
        return report

    owned = provider is None
    if provider is None:
        provider = make_provider(config)
    try:
        if config.lazy and config.style != OutputStyle.ORDER:
            await _analyze_lazy(report, config, provider)
        else:
            await _analyze_built(report, config, provider)
    finally:
        if owned:
            await provider.close()
    return report


async def _analyze_lazy(report: AnalysisReport, config: AnalysisConfig, provider: MetadataProvider) -> None:
    source = RegistryChildSource(provider, config.package, config.version)
    if await source.children(config.package) is None:
        logger.warning("Nothing to show: %s could not be resolved", config.package)
        return
    await _fill_report(report, config, source)
    report.resolved_version = source.resolved_versions.get(config.package)
    report.package_count = len(source.resolved_versions)


async def _analyze_built(report: AnalysisReport, config: AnalysisConfig, provider: MetadataProvider) -> None:
    graph = await GraphBuilder(provider).build(config.package, config.version, config.max_depth)
    if not graph:
        logger.warning("Nothing to show: %s could not be resolved", config.package)
        return
    report.resolved_version = graph.versions.get(config.package)
    report.package_count = len(graph)
    await _fill_report(report, config, GraphChildSource(graph), graph)


async def _fill_report(
    report: AnalysisReport,
    config: AnalysisConfig,
    source: ChildSource,
    graph: DependencyGraph | None = None,
) -> None:
    if config.style == OutputStyle.ORDER:
        report.load_order = load_order(
            graph,
            config.package,
            ignore_substring=config.ignore_substring,
            max_depth=config.max_depth,
            dependencies_first=config.dependencies_first,
        )
        return

    traverser = TreeTraverser(source, config.max_depth, config.ignore_substring)
    if config.style == OutputStyle.TREE:
        report.lines = await traverser.render(config.package)
    else:
        report.edges = await traverser.edges(config.package)
        report.lines = [format_flat_line(edge) for edge in report.edges]


def run_analysis(config: AnalysisConfig, provider: MetadataProvider | None = None) -> AnalysisReport:
    """Synchronous entry point for the CLI."""
    return asyncio.run(analyze(config, provider))
