"""
Remote content API resolvers.

Both lookups are best-effort: one request per record, no retry or backoff,
and any failure (network error, non-2xx status, unexpected payload shape)
degrades to an empty result.
"""

import httpx
from typing import Any, Dict, Optional
from migration.resolvers.base import EnrichmentResolver, SourceLookup
from core.config import settings
from core.exceptions import RemoteLookupError
import logging

logger = logging.getLogger(__name__)


class RemoteResolver(EnrichmentResolver):
    """
    Shared HTTP plumbing for remote lookups.

    Attributes:
        timeout: Request timeout in seconds (None waits indefinitely)
        transport: Optional httpx transport, used to stub the API in tests
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        if not key:
            return {}

        try:
            return await self.fetch(str(key))
        except RemoteLookupError as e:
            logger.warning(
                f"{self.name} lookup failed for {key}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            return {}

    async def fetch(self, key: str) -> Dict[str, Any]:
        """
        Fetch and unwrap the payload for ``key``.

        Raises:
            RemoteLookupError: For any request or payload failure
        """
        url = self.url_for(key)
        try:
            async with self._client() as client:
                response = await self.send(client, url, key)
                response.raise_for_status()
                payload = self.unwrap(response.json())

        except httpx.HTTPStatusError as e:
            raise RemoteLookupError(
                f"HTTP {e.response.status_code} from {self.name} lookup",
                context={
                    "url": url,
                    "status_code": e.response.status_code,
                    "lookup_key": key
                },
                original_exception=e
            )

        except httpx.HTTPError as e:
            raise RemoteLookupError(
                f"Request to {self.name} lookup failed",
                context={"url": url, "lookup_key": key},
                original_exception=e
            )

        # Not an HTTPError subclass; raised while building the request
        except httpx.InvalidURL as e:
            raise RemoteLookupError(
                f"Invalid {self.name} lookup URL",
                context={"url": url, "lookup_key": key},
                original_exception=e
            )

        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RemoteLookupError(
                f"Unexpected {self.name} response payload",
                context={"url": url, "lookup_key": key},
                original_exception=e
            )

        if not isinstance(payload, dict):
            raise RemoteLookupError(
                f"Unexpected {self.name} response payload",
                context={"url": url, "lookup_key": key}
            )
        return payload

    def url_for(self, key: str) -> str:
        raise NotImplementedError

    async def send(self, client: httpx.AsyncClient, url: str, key: str) -> httpx.Response:
        raise NotImplementedError

    def unwrap(self, data: Any) -> Any:
        raise NotImplementedError


class HierarchyResolver(RemoteResolver):
    """
    Course hierarchy lookup.

    ``GET {base}api/course/v1/hierarchy/{courseId}?mode=edit`` returning
    ``{"result": {"content": {...}}}``.
    """

    name = "course_hierarchy"

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url or settings.MIDDLEWARE_SERVICE_BASE_URL

    def url_for(self, key: str) -> str:
        return f"{self.base_url}api/course/v1/hierarchy/{key}"

    async def send(self, client: httpx.AsyncClient, url: str, key: str) -> httpx.Response:
        return await client.get(
            url,
            params={"mode": "edit"},
            headers={"Content-Type": "application/json"}
        )

    def unwrap(self, data: Any) -> Any:
        return data["result"]["content"]


class SearchResolver(RemoteResolver):
    """
    Content search lookup.

    ``POST`` a filter on ``identifier`` and take the first element of
    ``result.QuestionSet``. A fixed session cookie is sent when configured.
    """

    name = "content_search"

    def __init__(
        self,
        search_url: Optional[str] = None,
        cookie: Optional[str] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.search_url = search_url or settings.CONTENT_SEARCH_URL
        self.cookie = cookie if cookie is not None else settings.CONTENT_SEARCH_COOKIE

    def url_for(self, key: str) -> str:
        return self.search_url

    async def send(self, client: httpx.AsyncClient, url: str, key: str) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if self.cookie:
            headers["Cookie"] = self.cookie

        return await client.post(
            url,
            json={"request": {"filters": {"identifier": [key]}}},
            headers=headers
        )

    def unwrap(self, data: Any) -> Any:
        return data["result"]["QuestionSet"][0]
