"""
Base class for HTTP API clients.
"""

import json
import os
from typing import Any

import httpx

from connected_papers.apis.errors import (
    HttpStatusError,
    MalformedPayloadError,
    TransportError,
)
from connected_papers.utils.config import get_apis_config
from connected_papers.utils.logging import get_logger
from connected_papers.version import __version__

logger = get_logger(__name__)

USER_AGENT = f"connected-papers-python/{__version__}"


class BaseApiClient:
    """Base class for API clients.

    Holds an immutable endpoint configuration and one pooled
    httpx.AsyncClient, created on first use. Use as an async context
    manager or call close() to release connections.
    """

    def __init__(
        self,
        name: str,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            name: API name, used to look up configuration in apis.yaml
            api_key: API key (if None, read from the configured environment variable)
            base_url: Base URL for API (if None, loaded from config)
            timeout: Timeout in seconds (if None, loaded from config)
            headers: Extra HTTP headers merged over configured ones
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        api_config = get_apis_config().get_api_config(name)

        self.name = name
        self.base_url = (base_url or api_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else api_config.timeout_seconds
        self.api_key_header = api_config.api_key_header
        self.api_key_env = api_config.api_key_env

        if api_key is None and self.api_key_env:
            api_key = os.environ.get(self.api_key_env) or None
        self._api_key = api_key

        default_headers = {"User-Agent": USER_AGENT}
        if api_config.headers:
            default_headers.update(api_config.headers)
        if headers:
            default_headers.update(headers)
        self.default_headers = default_headers

        self._transport = transport
        self._session: httpx.AsyncClient | None = None

    @property
    def has_api_key(self) -> bool:
        return self._api_key is not None

    def _auth_headers(self) -> dict[str, str]:
        if self._api_key is None:
            return {}
        return {self.api_key_header: self._api_key}

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_session(self) -> httpx.AsyncClient:
        """Get HTTP session (lazy initialization)."""
        if self._session is None:
            self._session = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Send a request and return the buffered response.

        Raises:
            TransportError: The request did not produce a readable response
                (connection, timeout, body decoding).
        """
        session = await self._get_session()
        url = self._url(path)
        try:
            response = await session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._auth_headers(),
            )
        except httpx.HTTPError as e:
            logger.warning("API request failed", api=self.name, url=url, error=str(e))
            raise TransportError(f"{type(e).__name__}: {e}", url=url) from e

        logger.debug(
            "API response",
            api=self.name,
            method=method,
            url=url,
            status=response.status_code,
        )
        return response

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send a request and parse the JSON body.

        Args:
            allow_not_found: Return None on 404 instead of raising.

        Raises:
            TransportError: The request did not produce a response.
            HttpStatusError: Non-2xx status.
            MalformedPayloadError: Body is not valid JSON.
        """
        response = await self._request(method, path, params=params, json_body=json_body)

        if allow_not_found and response.status_code == 404:
            return None
        if not response.is_success:
            raise HttpStatusError(response.status_code, response.text, url=str(response.url))

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayloadError(str(e), payload=response.content) from e

    async def close(self) -> None:
        """Close the session."""
        if self._session:
            await self._session.aclose()
            self._session = None
            logger.debug("API client closed", api=self.name)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
