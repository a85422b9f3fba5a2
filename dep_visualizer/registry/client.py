"""Async registry client — resolves a package to its direct dependency names."""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from dep_visualizer.models import PackageMeta

from . import RegistryConfig
from .packument import Packument

logger = logging.getLogger(__name__)

LATEST = "latest"


def package_url(base_url: str, name: str) -> str:
    """Packument URL; ``@scope/name`` becomes ``@scope%2Fname``."""
    return base_url + quote(name, safe="@")


class NpmRegistryProvider:
    """Metadata provider backed by an npm-compatible registry.

    Results (including failures) are memoized per instance by
    ``(name, version or "latest")``, so one run never asks the registry the
    same question twice. Calls are awaited one at a time by the builder and
    traverser, which is why the cache has no lock.
    """

    def __init__(
        self,
        config: RegistryConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or RegistryConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.config.timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        self._cache: dict[tuple[str, str], PackageMeta | None] = {}

    async def resolve(self, name: str, version: str | None = None) -> PackageMeta | None:
        """Return the package's dependency names and resolved version, or None if unavailable."""
        key = (name, version or LATEST)
        if key in self._cache:
            logger.debug("cache hit: %s@%s", *key)
            return self._cache[key]

        meta = await self._fetch(name, version)
        self._cache[key] = meta
        return meta

    async def _fetch(self, name: str, version: str | None) -> PackageMeta | None:
        url = package_url(self.config.base_url, name)
        logger.debug("GET %s", url)
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            packument = Packument.model_validate(response.json())
        except httpx.HTTPError as e:
            logger.warning("Could not fetch %s: %s", name, e)
            return None
        except ValueError as e:
            # json decode errors and pydantic ValidationError both land here
            kind = "invalid packument" if isinstance(e, ValidationError) else "invalid JSON"
            logger.warning("Could not parse metadata for %s: %s", name, kind)
            return None

        chosen = packument.choose_version(version)
        if chosen is None:
            logger.warning("No versions published for %s", name)
            return None

        deps = packument.dependencies_of(chosen)
        if deps is None:
            logger.warning("Version %s of %s not found in registry", chosen, name)
            return None

        return PackageMeta(name=name, resolved_version=chosen, dependencies=deps)

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> NpmRegistryProvider:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
