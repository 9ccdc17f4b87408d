"""Shared fixtures for the dependency_age tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

from dependency_age.exceptions import RegistryFetchError


YARN_LOCK = '''\
# This file is generated by running "yarn install" inside your project.
# Manual changes might be lost - proceed with caution!

__metadata:
  version: 8
  cacheKey: 10c0

"@babel/code-frame@npm:^7.0.0, @babel/code-frame@npm:^7.22.13":
  version: 7.22.13
  resolution: "@babel/code-frame@npm:7.22.13"
  checksum: 10c0/22e342c8077c8b77eeb11f554ecca2ba14153f707b85294fcf6070b6f6150aae
  languageName: node
  linkType: hard

"left-pad@npm:^1.1.0":
  version: 1.3.0
  resolution: "left-pad@npm:1.3.0"
  languageName: node
  linkType: hard

"left-pad@npm:1.3.0":
  version: 1.3.0
  resolution: "left-pad@npm:1.3.0"
  languageName: node
  linkType: hard

"left-pad@npm:~1.1.0":
  version: 1.1.3
  resolution: "left-pad@npm:1.1.3"
  languageName: node
  linkType: hard

"my-app@workspace:.":
  version: 0.0.0-use.local
  resolution: "my-app@workspace:."
  languageName: unknown
  linkType: soft
'''


PACKUMENTS: Dict[str, Dict[str, Any]] = {
    "@babel/code-frame": {
        "name": "@babel/code-frame",
        "time": {
            "created": "2017-10-30T18:34:29.000Z",
            "modified": "2024-01-01T00:00:00.000Z",
            "7.22.13": "2023-08-24T11:15:04.000Z",
        },
    },
    "left-pad": {
        "name": "left-pad",
        "time": {
            "created": "2014-03-19T00:00:00.000Z",
            "modified": "2022-06-19T00:00:00.000Z",
            "1.1.3": "2016-09-23T19:52:47.000Z",
            "1.3.0": "2018-04-09T01:55:42.000Z",
        },
    },
}


class FakeRegistry:
    """In-memory registry that records every fetch."""

    def __init__(
        self,
        packuments: Optional[Dict[str, Dict[str, Any]]] = None,
        failing: Iterable[str] = (),
    ) -> None:
        self.packuments = dict(PACKUMENTS if packuments is None else packuments)
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch(self, name: str) -> Dict[str, Any]:
        self.calls.append(name)
        if name in self.failing or name not in self.packuments:
            raise RegistryFetchError(name, "HTTP 404")
        return self.packuments[name]


@pytest.fixture
def lockfile_path(tmp_path: Path) -> Path:
    path = tmp_path / "yarn.lock"
    path.write_text(YARN_LOCK, encoding="utf-8")
    return path


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def registry_factory():
    return FakeRegistry
