"""
Dependency Age Tool

Inventory the packages resolved in a yarn.lock, date every version from the
npm registry and report the version spread and the oldest dependencies.
"""

__version__ = "0.1.0"

from .cli import main

__all__ = ["main"]
