"""
On-disk cache of registry metadata with a time-to-live policy.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .exceptions import CacheReadError, CacheWriteError
from .time_utils import from_epoch_ms, to_epoch_ms, utc_now


logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = timedelta(hours=24)
FETCHED_AT_FIELD = "fetchedAt"


def cache_key(name: str) -> str:
    """Return a filesystem-safe file name for ``name``.

    The md5 suffix keeps names apart that sanitize to the same string,
    e.g. ``@a/b`` and ``@a_b``.
    """
    sanitized = name.replace("/", "_").replace("\\", "_")
    digest = hashlib.md5(name.encode("utf-8")).hexdigest()
    return f"{sanitized}_{digest}.json"


class MetadataCache:
    """One JSON file per package name under ``cache_dir``.

    ``read_enabled=False`` turns every read into a miss while writes still
    refresh the cache for the next run.
    """

    def __init__(
        self,
        cache_dir: Path,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        read_enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.ttl = ttl
        self.read_enabled = read_enabled
        self.clock = clock

    def path_for(self, name: str) -> Path:
        return self.cache_dir / cache_key(name)

    async def read(self, name: str) -> Optional[Dict[str, Any]]:
        """Return fresh cached metadata for ``name``, or ``None`` on a miss."""
        if not self.read_enabled:
            return None

        try:
            data = await asyncio.to_thread(self._load, name)
        except CacheReadError as exc:
            logger.debug("Cache miss for %s: %s", name, exc)
            return None
        if data is None:
            logger.debug("Cache miss for %s", name)
            return None

        fetched_at = data.get(FETCHED_AT_FIELD)
        if not self.is_fresh(fetched_at):
            logger.debug("Cache entry for %s is stale", name)
            return None

        logger.debug("Cache hit: metadata %s", name)
        return data

    async def write(self, name: str, metadata: Dict[str, Any]) -> Path:
        """Store ``metadata`` stamped with the current time."""
        record = dict(metadata)
        record[FETCHED_AT_FIELD] = to_epoch_ms(self.clock())
        path = await asyncio.to_thread(self._store, name, record)
        logger.debug("Cached metadata for %s at %s", name, path)
        return path

    def is_fresh(self, fetched_at: Any) -> bool:
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
            return False
        try:
            age = self.clock() - from_epoch_ms(fetched_at)
        except (OverflowError, OSError, ValueError):
            return False
        return age < self.ttl

    def _load(self, name: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(name)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise CacheReadError(f"Cannot read cache entry {path}: {exc}") from exc

        try:
            data = json.loads(content)
        except ValueError as exc:
            raise CacheReadError(f"Cannot decode cache entry {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CacheReadError(f"Cache entry {path} is not a JSON object")
        return data

    def _store(self, name: str, record: Dict[str, Any]) -> Path:
        path = self.path_for(name)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(record), encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove %s", tmp_path)
            raise CacheWriteError(f"Cannot write cache entry {path}: {exc}") from exc
        return path
