"""
Run configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

from .cache import DEFAULT_CACHE_TTL
from .lockfile import DEFAULT_LOCKFILE
from .registry import DEFAULT_REGISTRY_URL, DEFAULT_TIMEOUT


DEFAULT_MAX_OLD_VERSIONS = 5


def default_cache_dir() -> Path:
    return Path.home() / ".cache" / "dependency-age"


@dataclass(frozen=True)
class AnalyzerConfig:
    """Options for one analysis run.

    Args:
        lockfile: Lockfile to read. Default: ./yarn.lock
        verbose: Print a version table per package and enrich sequentially
        use_cache: Read cached registry metadata (writes happen either way)
        max_old_versions: Size of the oldest-versions report, 0 disables it
        cache_dir: Directory holding cached registry metadata
        cache_ttl: Age after which cached metadata is refetched
        registry_url: Base URL of the npm registry
        max_concurrency: Cap on concurrent package lookups, None for no cap
        timeout: HTTP timeout in seconds
        output_dir: Where to export JSON/CSV results, None to skip exports
        get_worksheets: Also export an Excel workbook with a sheet per package
    """

    lockfile: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_LOCKFILE)
    verbose: bool = False
    use_cache: bool = True
    max_old_versions: int = DEFAULT_MAX_OLD_VERSIONS
    cache_dir: Path = field(default_factory=default_cache_dir)
    cache_ttl: timedelta = DEFAULT_CACHE_TTL
    registry_url: str = DEFAULT_REGISTRY_URL
    max_concurrency: Optional[int] = None
    timeout: float = DEFAULT_TIMEOUT
    output_dir: Optional[Path] = None
    get_worksheets: bool = False

    def __post_init__(self) -> None:
        if self.max_old_versions < 0:
            raise ValueError("max_old_versions must be >= 0")
        if self.cache_ttl <= timedelta(0):
            raise ValueError("cache_ttl must be positive")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
