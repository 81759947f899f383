"""Registry client for searching and describing modules published to an npm-style registry."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import ApiError
from ..models import ModuleDetails
from ..utils.versions import sort_versions_desc

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_CDN_URL = "https://unpkg.com"
DEFAULT_TIMEOUT = 10.0


class RegistryClient:
    """Client for the registry search/metadata API and its file CDN.

    Search and version history come from the registry API; a module's
    package.json and README.md come from the CDN, which serves files from
    the latest published version. Every failure is reported as ApiError.
    """

    def __init__(
        self,
        registry_url: str | None = None,
        cdn_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize registry client.

        Args:
            registry_url: Registry API base URL (default: public npm registry)
            cdn_url: CDN base URL serving published package files (default: unpkg)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (for testing)
            client: Optional pre-built AsyncClient; the caller keeps ownership
        """
        self.registry_url = (registry_url or DEFAULT_REGISTRY_URL).rstrip("/")
        self.cdn_url = (cdn_url or DEFAULT_CDN_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def search(self, term: str, keywords: list[str] | tuple[str, ...] = ()) -> list[str]:
        """Search the registry and return matching package names.

        Args:
            term: Free-text search term
            keywords: Keyword facets, all of which must match

        Returns:
            Package names in registry relevance order

        Raises:
            ApiError: Non-2xx status or malformed body
        """
        text = term
        if keywords:
            text = f"{term} keywords:{','.join(keywords)}"

        data = await self._get_json(f"{self.registry_url}/-/v1/search", params={"text": text})

        objects = data.get("objects") if isinstance(data, dict) else None
        if not isinstance(objects, list):
            raise ApiError(message="Unexpected registry search response: missing 'objects'")

        try:
            names = [obj["package"]["name"] for obj in objects]
        except (KeyError, TypeError) as e:
            raise ApiError(message=f"Unexpected registry search response: {e}") from e

        logger.debug(f"Registry search '{text}' returned {len(names)} packages")
        return names

    async def fetch_descriptor(self, name: str) -> dict[str, Any]:
        """Fetch package.json of the latest published version.

        Raises:
            ApiError: Non-2xx status or body is not a JSON object
        """
        data = await self._get_json(f"{self.cdn_url}/{name}/package.json")
        if not isinstance(data, dict):
            raise ApiError(message=f"Unexpected package.json for '{name}': expected an object")
        return data

    async def fetch_details(self, name: str) -> ModuleDetails:
        """Fetch author, full version history and deprecation state.

        The first maintainer is reported as author. Versions are ordered
        newest to oldest; the module counts as deprecated when its newest
        version carries a deprecation notice.

        Raises:
            ApiError: Non-2xx status or document lacks maintainers/versions
        """
        data = await self._get_json(f"{self.registry_url}/{name}")

        if not isinstance(data, dict):
            raise ApiError(message=f"Unexpected registry document for '{name}'")
        maintainers = data.get("maintainers")
        versions = data.get("versions")
        if not isinstance(maintainers, list) or not isinstance(versions, dict):
            raise ApiError(message=f"Registry document for '{name}' lacks maintainers or versions")

        author = None
        if maintainers:
            first = maintainers[0]
            if not isinstance(first, dict):
                raise ApiError(message=f"Unexpected maintainer entry for '{name}'")
            author = first.get("name")

        ordered = sort_versions_desc(versions.keys())
        deprecated = False
        if ordered:
            newest = versions[ordered[0]]
            deprecated = bool(newest.get("deprecated")) if isinstance(newest, dict) else False

        return ModuleDetails(author=author, versions=tuple(ordered), deprecated=deprecated)

    async def fetch_readme(self, name: str) -> str | None:
        """Fetch README.md of the latest published version.

        Returns:
            Readme text, or None when the package has no readme (404)

        Raises:
            ApiError: Any other non-2xx status
        """
        response = await self._get(f"{self.cdn_url}/{name}/README.md")
        if response.status_code == 404:
            logger.debug(f"No readme for registry module '{name}'")
            return None
        _check_response(response)
        return response.text

    async def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        logger.debug(f"GET {url} {params or ''}")
        try:
            return await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ApiError(500, f"Request to {url} failed: {e}") from e

    async def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        response = await self._get(url, params=params)
        return _read_json(response)

    def __repr__(self) -> str:
        return f"RegistryClient({self.registry_url}, cdn={self.cdn_url})"


def _check_response(response: httpx.Response) -> None:
    """Raise ApiError unless the response has a 2xx status."""
    if not response.is_success:
        raise ApiError(response.status_code)


def _read_json(response: httpx.Response) -> Any:
    """Validate status and decode a JSON body, folding failures into ApiError."""
    _check_response(response)
    try:
        return response.json()
    except ValueError as e:
        raise ApiError(response.status_code, f"Invalid JSON from {response.request.url}: {e}") from e
