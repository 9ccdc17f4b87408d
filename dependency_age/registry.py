"""
Async client for the npm registry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .exceptions import RegistryFetchError


logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "dependency-age/0.1"


def package_url(registry_url: str, name: str) -> str:
    """URL of the packument for ``name``; ``@scope/pkg`` becomes ``@scope%2Fpkg``."""
    return f"{registry_url.rstrip('/')}/{quote(name, safe='@')}"


class NpmRegistryClient:
    """Fetch package metadata documents over one shared connection pool.

    ``max_connections=None`` lifts httpx's connection ceiling so that every
    package can be fetched at once.
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_connections: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.registry_url = registry_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> "NpmRegistryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, name: str) -> Dict[str, Any]:
        """Fetch the metadata document for ``name``.

        Raises:
            RegistryFetchError: On network errors, non-2xx responses, bodies
                that are not JSON objects, and "not found" documents.
        """
        url = package_url(self.registry_url, name)
        logger.info("Fetching metadata for %s", name)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise RegistryFetchError(name, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise RegistryFetchError(name, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise RegistryFetchError(name, f"invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise RegistryFetchError(name, "response is not a JSON object")
        if "error" in data:
            raise RegistryFetchError(name, str(data["error"]))
        return data
