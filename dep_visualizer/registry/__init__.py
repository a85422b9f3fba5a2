"""npm-compatible registry metadata provider."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org/"
DEFAULT_TIMEOUT = 15.0


@dataclass
class RegistryConfig:
    base_url: str = ""
    timeout: float = 0.0

    def __post_init__(self):
        if not self.base_url:
            self.base_url = os.getenv("DEP_VISUALIZER_REGISTRY", DEFAULT_REGISTRY_URL)
        if not self.timeout:
            self.timeout = float(os.getenv("DEP_VISUALIZER_TIMEOUT", DEFAULT_TIMEOUT))
        if not self.base_url.endswith("/"):
            self.base_url += "/"


from .client import NpmRegistryProvider, package_url
from .packument import Packument, VersionManifest

__all__ = [
    "DEFAULT_REGISTRY_URL",
    "NpmRegistryProvider",
    "Packument",
    "RegistryConfig",
    "VersionManifest",
    "package_url",
]
