"""
Provider HTTP client.

Sends QueryRequests to GraphQL and SQL providers over aiohttp and
classifies failures into typed fetch errors. No retries here: the
scheduler owns the retry policy.
"""

import json
from typing import Any

import aiohttp
from loguru import logger

from transfer_sync.config.constants import QueryProvider
from transfer_sync.config.settings import Settings, settings as default_settings
from transfer_sync.providers.types import QueryLanguage, QueryRequest
from transfer_sync.utils.exceptions import (
    NETWORK_ERRORS,
    ProviderHTTPError,
    ProviderNetworkError,
    ProviderResponseError,
)


class ProviderClient:
    """
    Async HTTP client for query providers.

    Usage:
        async with ProviderClient() as client:
            data = await client.execute(request, chain, provider)
    """

    def __init__(
        self,
        app_settings: Settings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            app_settings: Settings with credentials and timeout
            session: Optional shared aiohttp session (not closed by us)
        """
        self.settings = app_settings or default_settings
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ProviderClient":
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.settings.provider_request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the owned aiohttp session."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _headers(self, request: QueryRequest, provider: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}

        if provider == QueryProvider.BITQUERY:
            if request.url == self.settings.bitquery_streaming_url:
                if self.settings.bitquery_v2_token:
                    headers["Authorization"] = f"Bearer {self.settings.bitquery_v2_token}"
            elif self.settings.bitquery_api_key:
                headers["X-API-KEY"] = self.settings.bitquery_api_key
        elif provider == QueryProvider.CDP and self.settings.cdp_api_token:
            headers["Authorization"] = f"Bearer {self.settings.cdp_api_token}"

        return headers

    @staticmethod
    def _body(request: QueryRequest) -> dict[str, str]:
        if request.language == QueryLanguage.GRAPHQL:
            return {"query": request.text}
        return {"sql": request.text}

    async def execute(
        self,
        request: QueryRequest,
        chain: str,
        provider: str,
    ) -> Any:
        """
        Send a query and return the decoded payload.

        GraphQL responses are unwrapped to their ``data`` member.

        Raises:
            ProviderNetworkError: Connection failure or timeout
            ProviderHTTPError: Non-2xx status
            ProviderResponseError: Unparsable body or GraphQL errors
        """
        if self._session is None:
            raise RuntimeError("ProviderClient used outside of 'async with'")

        try:
            async with self._session.post(
                request.url,
                json=self._body(request),
                headers=self._headers(request, provider),
            ) as response:
                body = await response.text()
                status = response.status
        except NETWORK_ERRORS as e:
            raise ProviderNetworkError(
                f"Request to {request.url} failed: {e!r}", chain=chain, provider=provider
            ) from e

        if not 200 <= status < 300:
            raise ProviderHTTPError(status, body, chain=chain, provider=provider)

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ProviderResponseError(
                f"Unparsable response body: {body[:200]!r}", chain=chain, provider=provider
            ) from e

        if request.language == QueryLanguage.GRAPHQL:
            return self._unwrap_graphql(payload, chain, provider)

        logger.debug(f"[{chain}/{provider}] SQL query returned {len(body)} bytes")
        return payload

    @staticmethod
    def _unwrap_graphql(payload: Any, chain: str, provider: str) -> Any:
        if not isinstance(payload, dict):
            raise ProviderResponseError(
                "GraphQL response is not an object", chain=chain, provider=provider
            )
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise ProviderResponseError(
                f"GraphQL errors: {messages}", chain=chain, provider=provider
            )
        if payload.get("data") is None:
            raise ProviderResponseError(
                "GraphQL response has no data", chain=chain, provider=provider
            )
        return payload["data"]
