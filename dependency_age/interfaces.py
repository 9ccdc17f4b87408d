"""
Interfaces for metadata sources and stores.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Protocol


class MetadataSource(Protocol):
    """Fetch package metadata from a registry."""

    async def fetch(self, name: str) -> Dict[str, Any]:
        ...


class MetadataStore(Protocol):
    """Persist package metadata between runs."""

    async def read(self, name: str) -> Optional[Dict[str, Any]]:
        ...

    async def write(self, name: str, metadata: Dict[str, Any]) -> Path:
        ...
