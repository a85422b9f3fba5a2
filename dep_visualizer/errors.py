"""Exceptions raised past the package boundary."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Malformed or missing parameters; raised before any graph work starts."""


class ComparisonError(RuntimeError):
    """The npm comparison could not produce a result."""
