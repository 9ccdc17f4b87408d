"""
Core data models for dependency age reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ParsedResolution:
    """Package name and source protocol decoded from a resolution string."""

    name: str
    protocol: Optional[str]


@dataclass(frozen=True)
class ReleaseInfo:
    """Publish date of a resolved version."""

    released_at: datetime
    relative_age: str


@dataclass
class DependencyVersion:
    """A concrete installed version of a package.

    ``package_data`` and ``release`` stay ``None`` until enrichment attaches
    registry metadata.
    """

    name: str
    version: str
    resolution: str
    protocol: Optional[str] = None
    package_data: Optional[Dict[str, Any]] = field(default=None, repr=False)
    release: Optional[ReleaseInfo] = None

    @property
    def released_at(self) -> Optional[datetime]:
        return self.release.released_at if self.release is not None else None

    @property
    def relative_age(self) -> Optional[str]:
        return self.release.relative_age if self.release is not None else None

    @property
    def resolution_spec(self) -> str:
        """The resolution without its leading ``name@``."""
        prefix = f"{self.name}@"
        if self.resolution.startswith(prefix):
            return self.resolution[len(prefix):]
        return self.resolution


@dataclass
class Dependency:
    """All resolved versions of one package name, in lockfile order."""

    name: str
    versions: List[DependencyVersion] = field(default_factory=list)


@dataclass(frozen=True)
class OldVersion:
    """A row of the oldest-versions report."""

    name: str
    version: str
    relative_age: str
    released_at: datetime


@dataclass(frozen=True)
class AgeReport:
    """Aggregate view over every resolved version."""

    total_versions: int
    total_dependencies: int
    oldest: List[OldVersion]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_versions": self.total_versions,
            "total_dependencies": self.total_dependencies,
            "oldest": [
                {
                    "name": item.name,
                    "version": item.version,
                    "relative_age": item.relative_age,
                    "released_at": item.released_at.isoformat(),
                }
                for item in self.oldest
            ],
        }
