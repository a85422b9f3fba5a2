"""Compare our load order with what the real npm client installs."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dep_visualizer.errors import ComparisonError
from dep_visualizer.graph import GraphBuilder, MetadataProvider, load_order

logger = logging.getLogger(__name__)

INSTALL_TIMEOUT = 10 * 60
LS_TIMEOUT = 60


@dataclass
class ComparisonReport:
    package: str
    version: str | None
    npm_order: list[str] = field(default_factory=list)
    our_order: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def only_in_npm(self) -> list[str]:
        ours = set(self.our_order)
        return [name for name in self.npm_order if name not in ours]

    @property
    def only_in_ours(self) -> list[str]:
        theirs = set(self.npm_order)
        return [name for name in self.our_order if name not in theirs]


def extract_npm_order(tree: dict[str, Any]) -> list[str]:
    """Pre-order, first-seen package names from ``npm ls --all --json`` output."""
    order: list[str] = []
    seen: set[str] = set()
    stack = [iter((tree.get("dependencies") or {}).items())]
    while stack:
        try:
            name, info = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        if name in seen:
            continue
        seen.add(name)
        order.append(name)
        children = (info or {}).get("dependencies") or {}
        if children:
            stack.append(iter(children.items()))
    return order


def run_npm_tree(package: str, version: str | None, workdir: Path) -> dict[str, Any]:
    """Install ``package`` into a scratch project and return npm's dependency tree."""
    if shutil.which("npm") is None:
        raise ComparisonError("npm executable not found on PATH")

    manifest = {
        "name": "dep-visualizer-compare",
        "version": "1.0.0",
        "private": True,
        "dependencies": {package: version or "latest"},
    }
    (workdir / "package.json").write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")

    try:
        install = subprocess.run(
            ["npm", "install", "--no-audit", "--no-fund"],
            cwd=workdir, capture_output=True, text=True, timeout=INSTALL_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        logger.warning("npm install timed out after %ds, continuing with what was installed", INSTALL_TIMEOUT)
    else:
        if install.returncode != 0:
            logger.warning("npm install exited with %d, continuing: %s", install.returncode, install.stderr.strip())

    # npm ls exits non-zero on peer/extraneous problems but still prints the tree
    try:
        listing = subprocess.run(
            ["npm", "ls", "--all", "--json"],
            cwd=workdir, capture_output=True, text=True, timeout=LS_TIMEOUT,
        )
    except subprocess.TimeoutExpired as e:
        raise ComparisonError(f"npm ls timed out after {LS_TIMEOUT}s") from e
    if not listing.stdout.strip():
        raise ComparisonError(f"npm ls produced no output: {listing.stderr.strip()}")
    try:
        return json.loads(listing.stdout)
    except json.JSONDecodeError as e:
        raise ComparisonError(f"Could not parse npm ls output: {e}") from e


async def compare_with_npm(
    package: str,
    version: str | None,
    provider: MetadataProvider,
    max_depth: int = 100,
    ignore_substring: str | None = None,
) -> ComparisonReport:
    tmpdir = Path(tempfile.mkdtemp(prefix="npm-compare-"))
    try:
        tree = await asyncio.to_thread(run_npm_tree, package, version, tmpdir)
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)

    graph = await GraphBuilder(provider).build(package, version, max_depth)
    result = load_order(graph, package, ignore_substring=ignore_substring, max_depth=max_depth)
    return ComparisonReport(
        package=package,
        version=version,
        npm_order=extract_npm_order(tree),
        our_order=result.order,
        cycles=result.cycles,
    )
