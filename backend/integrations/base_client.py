"""Base async HTTP client for hosted backend APIs."""
import logging
from typing import Any, Optional
from abc import ABC, abstractmethod

import httpx

logger = logging.getLogger(__name__)


class BaseAPIClient(ABC):
    """Base class for API clients.

    Requests are made once; callers decide how to map a failure.
    Non-2xx responses raise ``httpx.HTTPStatusError`` and network
    failures raise ``httpx.RequestError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    def get_headers(self) -> dict[str, str]:
        """Return headers for API requests. Override in subclasses."""
        pass

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json_data: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body (None if empty)."""
        request_headers = self.get_headers()
        if headers:
            request_headers.update(headers)

        try:
            response = await self.client.request(
                method=method,
                url=path,
                params=params,
                json=json_data,
                content=content,
                headers=request_headers,
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error {e.response.status_code} for {method} {path}: {e.response.text}"
            )
            raise
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {path}: {e}")
            raise

    async def get(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> Any:
        return await self._request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        json_data: Optional[Any] = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        content: Optional[bytes] = None,
    ) -> Any:
        return await self._request(
            "POST", path, params=params, json_data=json_data, content=content, headers=headers
        )

    async def open_stream(
        self,
        url: str,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """Open a streamed GET (binary proxying), following redirects.

        Anything but a final 2xx raises ``httpx.HTTPStatusError``.
        Caller must ``aclose()`` the response.
        """
        try:
            request = self.client.build_request("GET", url, headers=headers)
            response = await self.client.send(request, stream=True, follow_redirects=True)
        except httpx.RequestError as e:
            logger.error(f"Request error for GET {url}: {e}")
            raise

        if not response.is_success:
            await response.aread()
            logger.error(f"HTTP error {response.status_code} for GET {url}: {response.text}")
            await response.aclose()
            response.raise_for_status()
        return response
