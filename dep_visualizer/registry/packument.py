"""Pydantic models for the parts of a registry packument we read."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VersionManifest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: str = ""
    dependencies: dict[str, Any] = Field(default_factory=dict)

    @field_validator("dependencies", mode="before")
    @classmethod
    def _dependency_map(cls, value):
        # null, and the list form some very old manifests carry, mean none
        return value if isinstance(value, dict) else {}


class Packument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = ""
    dist_tags: dict[str, str] = Field(default_factory=dict, alias="dist-tags")
    versions: dict[str, VersionManifest] = Field(default_factory=dict)

    def choose_version(self, requested: str | None = None) -> str | None:
        """Pick the concrete version for a request.

        A requested dist-tag is mapped through ``dist-tags``; no request means
        ``latest``, falling back to the highest published version.
        """
        if requested:
            return self.dist_tags.get(requested, requested)
        latest = self.dist_tags.get("latest")
        if latest:
            return latest
        if not self.versions:
            return None
        return max(self.versions, key=_version_key)

    def dependencies_of(self, version: str) -> list[str] | None:
        manifest = self.versions.get(version)
        if manifest is None:
            return None
        return list(manifest.dependencies)


def _version_key(version: str) -> tuple:
    # "1.10.0" > "1.9.0"; pre-release tails sort below the release
    main, _, pre = version.partition("-")
    numbers = tuple(int(p) if p.isdigit() else -1 for p in re.split(r"[.+]", main))
    return numbers, pre == "", pre
