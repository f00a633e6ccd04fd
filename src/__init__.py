# src/__init__.py — v1
"""medileaf: leaflet section extraction, content normalization and cached section summaries."""

from medileaf.version import __version__

__all__ = ["__version__"]
