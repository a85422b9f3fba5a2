"""Click CLI with show, compare and example subcommands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from dep_visualizer import __version__
from dep_visualizer.compare import compare_with_npm
from dep_visualizer.errors import ComparisonError, ConfigurationError
from dep_visualizer.graph import write_example_graph
from dep_visualizer.models import (
    DEFAULT_MAX_DEPTH,
    AnalysisConfig,
    AnalysisReport,
    Mode,
    OutputStyle,
)
from dep_visualizer.pipeline import make_provider, run_analysis

_MODE_CHOICES = [m.value for m in Mode]
_STYLE_CHOICES = [s.value for s in OutputStyle]
_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug)")
def cli(verbose: int):
    """dep-visualizer: Show a package's dependency tree, load order and cycles."""
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--mode", "-m", type=click.Choice(_MODE_CHOICES), default=Mode.FILE.value, help="Graph file or live registry")
@click.option("--package", "-p", "package", required=True, help="Package to start from")
@click.option("--version", "version", help="Pin the root package version (live mode)")
@click.option("--graph-file", "-f", type=click.Path(path_type=Path), help="Graph file (file mode)")
@click.option("--registry", "registry_url", help="Registry URL (live mode)")
@click.option("--max-depth", "-d", type=int, default=DEFAULT_MAX_DEPTH, show_default=True, help="Maximum depth")
@click.option("--ignore", "-i", "ignore_substring", help="Skip dependencies whose name contains this")
@click.option("--style", "-s", type=click.Choice(_STYLE_CHOICES), default=OutputStyle.TREE.value, help="Output style")
@click.option("--deps-first", is_flag=True, help="Order dependencies before their dependents")
@click.option("--lazy/--eager", default=True, help="Live mode: fetch while walking, or build the graph first")
@click.option("--timeout", type=float, help="Registry request timeout in seconds")
def show(
    mode: str,
    package: str,
    version: str | None,
    graph_file: Path | None,
    registry_url: str | None,
    max_depth: int,
    ignore_substring: str | None,
    style: str,
    deps_first: bool,
    lazy: bool,
    timeout: float | None,
):
    """Print the dependency tree, flat edge list or load order of a package."""
    config = AnalysisConfig(
        package=package,
        mode=Mode(mode),
        version=version,
        graph_file=graph_file,
        registry_url=registry_url,
        max_depth=max_depth,
        ignore_substring=ignore_substring,
        style=OutputStyle(style),
        dependencies_first=deps_first,
        lazy=lazy,
        timeout=timeout,
    )

    try:
        report = run_analysis(config)
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    _print_report(report)


@cli.command()
@click.option("--package", "-p", "package", required=True, help="Package to install with npm")
@click.option("--version", "version", help="Version to install (default: latest)")
@click.option("--registry", "registry_url", help="Registry URL for our side of the comparison")
@click.option("--max-depth", "-d", type=int, default=DEFAULT_MAX_DEPTH, show_default=True)
@click.option("--ignore", "-i", "ignore_substring", help="Skip dependencies whose name contains this")
@click.option("--limit", type=int, default=20, show_default=True, help="Names to list per side")
def compare(
    package: str,
    version: str | None,
    registry_url: str | None,
    max_depth: int,
    ignore_substring: str | None,
    limit: int,
):
    """Compare our load order with a real `npm install`."""
    config = AnalysisConfig(
        package=package,
        mode=Mode.LIVE,
        version=version,
        registry_url=registry_url,
        max_depth=max_depth,
        ignore_substring=ignore_substring,
    )
    try:
        config.validate()
    except ConfigurationError as e:
        raise click.UsageError(str(e))

    async def _run():
        async with make_provider(config) as provider:
            return await compare_with_npm(package, version, provider, max_depth, ignore_substring)

    click.echo(f"Installing {package}@{version or 'latest'} with npm (this can take a while)...")
    try:
        result = asyncio.run(_run())
    except ComparisonError as e:
        raise click.ClickException(str(e))

    click.echo(f"\nnpm order: {len(result.npm_order)} package(s)")
    click.echo(f"our order: {len(result.our_order)} package(s)\n")
    _print_numbered("npm", result.npm_order[:limit])
    _print_numbered("ours", result.our_order[:limit])

    click.echo("Only in npm:  " + (", ".join(result.only_in_npm[:limit]) or "(none)"))
    click.echo("Only in ours: " + (", ".join(result.only_in_ours[:limit]) or "(none)"))
    if result.cycles:
        click.echo(click.style("\nCycles in our graph (they affect the order):", fg="red"))
        for cycle in result.cycles:
            click.echo(f"  {' -> '.join(cycle)}")
    click.echo(
        "\nnpm hoists and dedupes packages, honors lockfiles and handles peer and "
        "optional dependencies, so its install order can legitimately differ."
    )


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), default="complex_graph.txt")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def example(path: Path, force: bool):
    """Write an example graph file with two cycles."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    write_example_graph(path)
    click.echo(f"Wrote example graph to {path}")
    click.echo(f"Try: dep-visualizer show -f {path} -p A --style order")


def _print_report(report: AnalysisReport) -> None:
    if report.is_empty:
        click.echo(f"Nothing to show: could not resolve {report.package}.")
        return

    header = report.package
    if report.resolved_version:
        header += f"@{report.resolved_version}"
    click.echo(click.style(f"{header} ({report.package_count} package(s))", fg="cyan"))

    if report.style != OutputStyle.ORDER:
        if report.style == OutputStyle.FLAT:
            click.echo("Dependencies (parent -> child):")
        for line in report.lines:
            click.echo(line)
        return

    result = report.load_order
    _print_numbered("Load order", result.order)
    if result.cycles:
        click.echo(click.style(f"Cycles found: {len(result.cycles)}", fg="red"))
        for cycle in result.cycles:
            click.echo(f"  {' -> '.join(cycle)}")
    else:
        click.echo(click.style("No cycles.", fg="green"))


def _print_numbered(title: str, names: list[str]) -> None:
    click.echo(f"{title}:")
    if not names:
        click.echo("  (empty)")
    for i, name in enumerate(names, start=1):
        click.echo(f"  {i}. {name}")
    click.echo()


if __name__ == "__main__":
    cli()
