"""
Read a Yarn lockfile and index its resolved dependencies by package name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .exceptions import LockfileReadError, MalformedResolutionError
from .models import Dependency, DependencyVersion, ParsedResolution


logger = logging.getLogger(__name__)

DEFAULT_LOCKFILE = "yarn.lock"
DEFAULT_REGISTRY_PROTOCOL = "npm"
RESERVED_KEY_PREFIX = "__"


def parse_resolution(text: str) -> ParsedResolution:
    """Split a resolution such as ``left-pad@npm:1.3.0`` into name and protocol.

    A leading ``@`` belongs to a scoped package name and is skipped when
    looking for the separator.
    """
    if not isinstance(text, str):
        raise MalformedResolutionError(repr(text))

    separator = text.find("@", 1 if text.startswith("@") else 0)
    if separator == -1:
        raise MalformedResolutionError(text)

    name = text[:separator]
    spec = text[separator + 1:]
    protocol = None
    if spec.startswith(f"{DEFAULT_REGISTRY_PROTOCOL}:"):
        protocol = DEFAULT_REGISTRY_PROTOCOL
    return ParsedResolution(name=name, protocol=protocol)


def read_lockfile(path: Union[str, Path]) -> Dict[str, Any]:
    """Decode a lockfile into a mapping of lock-entry key to entry."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LockfileReadError(f"Cannot read lockfile {path}: {exc}") from exc

    try:
        # BaseLoader keeps every scalar a string, so "1.10" stays "1.10"
        data = yaml.load(content, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise LockfileReadError(f"Cannot parse lockfile {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LockfileReadError(f"Cannot parse lockfile {path}: expected a mapping at top level")
    return data


def index_dependencies(lockfile: Mapping[str, Any]) -> List[Dependency]:
    """Group lock entries by package name, dropping duplicate resolutions.

    Names keep the order in which they are first seen, and so do the versions
    within each name.
    """
    seen = set()
    dependencies: Dict[str, Dependency] = {}

    for key, entry in lockfile.items():
        if str(key).startswith(RESERVED_KEY_PREFIX):
            continue

        resolution = entry.get("resolution") if isinstance(entry, Mapping) else None
        if not isinstance(resolution, str):
            raise MalformedResolutionError(repr(resolution))
        if resolution in seen:
            continue

        parsed = parse_resolution(resolution)
        seen.add(resolution)

        dependency = dependencies.get(parsed.name)
        if dependency is None:
            dependency = dependencies[parsed.name] = Dependency(name=parsed.name)

        dependency.versions.append(DependencyVersion(
            name=parsed.name,
            version=str(entry.get("version", "")),
            resolution=resolution,
            protocol=parsed.protocol,
        ))

    logger.debug(
        "Indexed %d versions of %d dependencies",
        sum(len(dep.versions) for dep in dependencies.values()),
        len(dependencies),
    )
    return list(dependencies.values())


def get_dependencies(path: Optional[Union[str, Path]] = None) -> List[Dependency]:
    """Read ``path`` (default ``./yarn.lock``) and index its dependencies."""
    if path is None:
        path = Path.cwd() / DEFAULT_LOCKFILE
    return index_dependencies(read_lockfile(path))
