from typing import Any, Dict, Optional

import httpx
from loguru import logger

from rp_roster.config.settings import settings


class RosterError(Exception):
    """Base exception for failures that abort a roster build."""

    pass


class MissingCredentialError(RosterError):
    """Raised when required configuration (board id, API token) is absent."""

    pass


class UpstreamFetchError(RosterError):
    """Raised when an upstream API call fails or answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BaseApiClient:
    """Shared plumbing for the upstream API clients.

    Requests are made exactly once; there is no retry layer.
    """

    name: str = "upstream"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Sends one request and returns the response, whatever its status.

        Transport failures (DNS, connection, timeout) are wrapped in
        UpstreamFetchError; status handling is left to the caller.
        """
        logger.debug(
            f"Making {method} request to {self.name}",
            url=url,
            has_json=json_data is not None,
        )
        try:
            response = await self.client.request(
                method, url, params=params, json=json_data, **kwargs
            )
        except httpx.RequestError as e:
            logger.error(f"Request error talking to {self.name}: {e!r}")
            raise UpstreamFetchError(f"Request to {self.name} failed") from e

        logger.debug(f"{self.name} responded with {response.status_code}")
        return response

    async def close(self):
        """Closes the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()
            logger.debug(f"Closed HTTP client for {self.name}")
