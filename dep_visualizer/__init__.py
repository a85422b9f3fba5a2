"""dep-visualizer: dependency trees, load order and cycle detection for packages."""

__version__ = "0.4.0"
