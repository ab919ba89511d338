"""Extension gallery client for extcli.

Queries the remote marketplace catalog for extensions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from extensions.manifest import ExtensionManifest, ManifestError

logger = logging.getLogger(__name__)


class GalleryError(Exception):
    """Raised when gallery operations fail."""

    pass


class FilterType:
    """Criterion types understood by the extensionquery endpoint."""

    TAG = 1
    EXTENSION_ID = 4
    CATEGORY = 5
    EXTENSION_NAME = 7
    TARGET = 8
    FEATURED = 9
    SEARCH_TEXT = 10
    EXCLUDE_WITH_FLAGS = 12


class Flags:
    """Query flags controlling how much detail the gallery returns."""

    NONE = 0x0
    INCLUDE_VERSIONS = 0x1
    INCLUDE_FILES = 0x2
    INCLUDE_CATEGORY_AND_TAGS = 0x4
    INCLUDE_SHARED_ACCOUNTS = 0x8
    INCLUDE_VERSION_PROPERTIES = 0x10
    EXCLUDE_NON_VALIDATED = 0x20
    INCLUDE_INSTALLATION_TARGETS = 0x40
    INCLUDE_ASSET_URI = 0x80
    INCLUDE_STATISTICS = 0x100
    INCLUDE_LATEST_VERSION_ONLY = 0x200
    UNPUBLISHED = 0x1000


TARGET_PLATFORM = "Microsoft.VisualStudio.Code"

QUERY_FLAGS = (
    Flags.INCLUDE_VERSIONS
    | Flags.INCLUDE_FILES
    | Flags.INCLUDE_CATEGORY_AND_TAGS
    | Flags.INCLUDE_VERSION_PROPERTIES
    | Flags.INCLUDE_ASSET_URI
    | Flags.INCLUDE_LATEST_VERSION_ONLY
)


@dataclass
class QueryOptions:
    """What to ask the gallery for."""

    text: str | None = None
    ids: list[str] = field(default_factory=list)
    page_size: int | None = None
    page_number: int = 1


@dataclass
class QueryResult:
    """One page of gallery results plus a way to fetch the others.

    Attributes:
        first_page: Extensions on the requested page.
        total: Total number of matches reported by the gallery.
        page_size: Number of entries per page.
    """

    first_page: list[ExtensionManifest]
    total: int
    page_size: int
    _gallery: ExtensionGalleryService | None = field(default=None, repr=False)
    _options: QueryOptions | None = field(default=None, repr=False)

    @property
    def pages(self) -> int:
        if self.page_size <= 0:
            return 1
        return max(1, -(-self.total // self.page_size))

    async def get_page(self, page_number: int) -> list[ExtensionManifest]:
        """Fetch another page of the same query (1-indexed)."""
        if self._gallery is None or self._options is None:
            return self.first_page
        if page_number == self._options.page_number:
            return self.first_page
        options = replace(self._options, page_number=page_number)
        result = await self._gallery.query(options)
        return result.first_page


class ExtensionGalleryService:
    """Client for the extension gallery.

    Example:
        >>> gallery = ExtensionGalleryService()
        >>> result = await gallery.query(QueryOptions(ids=["ms-python.python"]))
        >>> result.first_page[0].version
    """

    DEFAULT_SERVICE_URL = "https://marketplace.visualstudio.com/_apis/public/gallery"
    DEFAULT_PAGE_SIZE = 10

    def __init__(
        self,
        service_url: str | None = DEFAULT_SERVICE_URL,
        timeout: float = 30.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the gallery client.

        Args:
            service_url: Base URL of the gallery API. Empty disables the gallery.
            timeout: Request timeout in seconds.
            page_size: Default number of results per page.
            client: Shared HTTP client; one is created per request otherwise.
        """
        self.service_url = service_url.rstrip("/") if service_url else None
        self.timeout = timeout
        self.page_size = page_size
        self._client = client

    def is_enabled(self) -> bool:
        return bool(self.service_url)

    async def query(self, options: QueryOptions | None = None) -> QueryResult:
        """Query the gallery.

        Args:
            options: Search text and/or exact ids to look up.

        Returns:
            The requested page of results.

        Raises:
            GalleryError: If the gallery is disabled or the request fails.
        """
        if not self.is_enabled():
            raise GalleryError("No extension gallery service configured.")

        options = options or QueryOptions()
        page_size = options.page_size or self.page_size
        payload = self._build_query(options, page_size)

        logger.debug(f"Gallery query: ids={options.ids} text={options.text!r}")
        data = await self._request("/extensionquery", payload)

        try:
            result = (data.get("results") or [{}])[0]
            extensions = [
                ExtensionManifest.from_gallery(entry)
                for entry in result.get("extensions") or []
            ]
            total = self._total_count(result, default=len(extensions))
        except (AttributeError, IndexError, TypeError, ValueError, ManifestError) as e:
            raise GalleryError(f"Invalid gallery response: {e}")

        logger.debug(f"Gallery returned {len(extensions)} of {total} extension(s)")

        return QueryResult(
            first_page=extensions,
            total=total,
            page_size=page_size,
            _gallery=self,
            _options=options,
        )

    def _build_query(self, options: QueryOptions, page_size: int) -> dict[str, Any]:
        """Build the extensionquery request body."""
        criteria: list[dict[str, Any]] = [
            {"filterType": FilterType.TARGET, "value": TARGET_PLATFORM},
            {"filterType": FilterType.EXCLUDE_WITH_FLAGS, "value": str(Flags.UNPUBLISHED)},
        ]

        if options.text:
            criteria.append({"filterType": FilterType.SEARCH_TEXT, "value": options.text})

        for extension_id in options.ids:
            criteria.append({"filterType": FilterType.EXTENSION_NAME, "value": extension_id})

        return {
            "filters": [
                {
                    "criteria": criteria,
                    "pageNumber": options.page_number,
                    "pageSize": page_size,
                    "sortBy": 0,
                    "sortOrder": 0,
                }
            ],
            "assetTypes": [],
            "flags": QUERY_FLAGS,
        }

    def _total_count(self, result: dict[str, Any], default: int) -> int:
        for metadata in result.get("resultMetadata") or []:
            if metadata.get("metadataType") != "ResultCount":
                continue
            for item in metadata.get("metadataItems") or []:
                if item.get("name") == "TotalCount":
                    return int(item.get("count", default))
        return default

    async def _request(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a query to the gallery and decode the JSON reply."""
        url = f"{self.service_url}/{endpoint.lstrip('/')}"
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json;api-version=3.0-preview.1",
        }

        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise GalleryError(f"Gallery error: {e.response.status_code}")
        except httpx.RequestError as e:
            raise GalleryError(f"Connection error: {e}")
        except ValueError as e:
            raise GalleryError(f"Invalid gallery response: {e}")

        if not isinstance(data, dict):
            raise GalleryError("Invalid gallery response: expected a JSON object")
        return data
