# src/__init__.py - v1
"""astroreport: astrological report generation, caching and comparison."""

from astroreport.version import __version__

__all__ = ["__version__"]
