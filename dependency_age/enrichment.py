"""
Attach registry publish dates to resolved dependency versions.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .exceptions import RegistryFetchError
from .interfaces import MetadataSource, MetadataStore
from .lockfile import DEFAULT_REGISTRY_PROTOCOL
from .models import Dependency, ReleaseInfo
from .time_utils import parse_timestamp, relative_age, utc_now


logger = logging.getLogger(__name__)

# Keys of the registry "time" map that are not versions.
NON_VERSION_TIME_KEYS = frozenset({"created", "modified"})


def has_registry_source(dependency: Dependency) -> bool:
    return any(v.protocol == DEFAULT_REGISTRY_PROTOCOL for v in dependency.versions)


def apply_metadata(
    dependency: Dependency,
    package_data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> int:
    """Attach ``package_data`` to every version and date the ones it knows.

    Returns the number of versions that received a release date.
    """
    now = now or utc_now()
    time_data = package_data.get("time")
    if not isinstance(time_data, dict):
        time_data = {}

    dated = 0
    for version in dependency.versions:
        version.package_data = package_data
        if version.version in NON_VERSION_TIME_KEYS:
            continue
        released_at = parse_timestamp(time_data.get(version.version))
        if released_at is None:
            continue
        version.release = ReleaseInfo(
            released_at=released_at,
            relative_age=relative_age(released_at, now),
        )
        dated += 1
    return dated


class Enricher:
    """Look up registry metadata per package, through the cache when possible.

    Cache writes run as background tasks. The owner must call
    ``wait_for_pending_writes`` before shutting down.
    """

    def __init__(
        self,
        registry: MetadataSource,
        cache: MetadataStore,
        max_concurrency: Optional[int] = None,
        verbose: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.max_concurrency = max_concurrency
        self.verbose = verbose
        self.clock = clock
        self.pending_writes: List[asyncio.Task] = []

    async def get_package_data(self, name: str) -> Optional[Dict[str, Any]]:
        data = await self.cache.read(name)
        if data is not None:
            return data

        try:
            data = await self.registry.fetch(name)
        except RegistryFetchError as exc:
            self._log_failure("Skipping %s: %s", name, exc)
            return None

        self.pending_writes.append(asyncio.create_task(self.cache.write(name, data)))
        return data

    async def enrich(self, dependency: Dependency) -> bool:
        """Enrich one dependency; returns False when it was left untouched."""
        if not has_registry_source(dependency):
            logger.debug("Skipping %s: not resolved from the registry", dependency.name)
            return False

        package_data = await self.get_package_data(dependency.name)
        if package_data is None:
            return False

        dated = apply_metadata(dependency, package_data, self.clock())
        logger.debug(
            "Dated %d of %d versions of %s",
            dated, len(dependency.versions), dependency.name,
        )
        return True

    async def enrich_all(
        self,
        dependencies: Iterable[Dependency],
        concurrent: bool = True,
        on_done: Optional[Callable[[Dependency], None]] = None,
    ) -> int:
        """Enrich every dependency and return how many were enriched.

        Sequential mode processes names in lockfile order. Concurrent mode
        starts one task per name, capped by ``max_concurrency`` when set.
        ``on_done`` is called with each dependency once it is processed.
        """
        dependencies = list(dependencies)

        if not concurrent:
            enriched = 0
            for dependency in dependencies:
                enriched += await self.enrich(dependency)
                if on_done is not None:
                    on_done(dependency)
            return enriched

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run_one(dependency: Dependency) -> bool:
            if semaphore is None:
                result = await self.enrich(dependency)
            else:
                async with semaphore:
                    result = await self.enrich(dependency)
            if on_done is not None:
                on_done(dependency)
            return result

        results = await asyncio.gather(*(run_one(dep) for dep in dependencies))
        return sum(results)

    async def wait_for_pending_writes(self) -> int:
        """Wait for every scheduled cache write; returns the number that failed."""
        pending, self.pending_writes = self.pending_writes, []
        if not pending:
            return 0

        results = await asyncio.gather(*pending, return_exceptions=True)
        failures = 0
        for result in results:
            if isinstance(result, BaseException):
                failures += 1
                self._log_failure("Cache write failed: %s", result)
        return failures

    def _log_failure(self, message: str, *args: Any) -> None:
        if self.verbose:
            logger.warning(message, *args)
        else:
            logger.debug(message, *args)
