"""Shared plumbing for the remote market-data services."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from topwallets_bot.errors import UpstreamError
from topwallets_bot.models import ApiEnvelope
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class ServiceClient:
    """One remote service: immutable configuration plus a lazily opened
    ``httpx.AsyncClient`` shared by every in-flight request.

    Calls are single-attempt. Transport errors, non-2xx statuses and bodies
    that are not JSON surface as :class:`UpstreamError`.
    """

    name = "service"

    def __init__(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = str(base_url)
        self.headers: Dict[str, str] = {
            "Content-Type": "application/json",
            **(headers or {}),
        }
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            async with self._client_lock:
                if self._http_client is None:
                    self._http_client = httpx.AsyncClient(
                        base_url=self.base_url,
                        headers=self.headers,
                        timeout=self.timeout,
                        transport=self._transport,
                        limits=httpx.Limits(
                            max_keepalive_connections=10, max_connections=20
                        ),
                    )
        return self._http_client

    async def close(self) -> None:
        """Release the underlying connection pool."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        client = await self._client()
        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.error(
                "upstream_transport_error",
                service=self.name,
                path=path,
                error=str(exc),
            )
            raise UpstreamError(
                f"{self.name} request failed: {exc}", service=self.name
            ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = _message_from(payload) or response.reason_phrase or "HTTP error"
            logger.error(
                "upstream_http_error",
                service=self.name,
                path=path,
                status=response.status_code,
                error=message,
            )
            raise UpstreamError(
                message, service=self.name, status_code=response.status_code
            )

        if payload is None:
            logger.error("upstream_invalid_body", service=self.name, path=path)
            raise UpstreamError(
                f"{self.name} returned an invalid response",
                service=self.name,
                status_code=response.status_code,
            )
        return payload

    async def _request_envelope(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Unwrap a ``{success, message, data}`` envelope and return ``data``.

        ``success: false`` and a malformed envelope are treated exactly like a
        transport failure.
        """
        payload = await self._request_json(method, path, params=params, json=json)
        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{self.name} returned an unexpected payload", service=self.name
            )
        try:
            envelope = ApiEnvelope.model_validate(payload)
        except PydanticValidationError as exc:
            logger.error("upstream_malformed_envelope", service=self.name, path=path)
            raise UpstreamError(
                f"{self.name} returned an unexpected payload", service=self.name
            ) from exc
        if not envelope.success:
            message = envelope.message or f"{self.name} request was not successful"
            logger.warning(
                "upstream_request_unsuccessful",
                service=self.name,
                path=path,
                error=message,
            )
            raise UpstreamError(message, service=self.name)
        return envelope.data


def _message_from(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message:
            return message
    return None


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "ServiceClient"]
