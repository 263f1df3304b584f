"""Shared HTTP plumbing for the Bandwidth REST APIs."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from bridge.errors import VendorApiError

LOGGER = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, VendorApiError) and exc.transient


class BandwidthHttpClient:
    """Basic-auth JSON client for one Bandwidth API.

    Transient failures (network errors, 429 and 5xx) of idempotent requests
    are retried with exponential backoff. Everything else fails fast as a
    `VendorApiError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str,
        password: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_max_wait: float = 4.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = (username, password)
        self._timeout = timeout
        self._retry_attempts = max(1, retry_attempts)
        self._retry_max_wait = retry_max_wait
        self._transport = transport

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        idempotent: bool = False,
    ) -> Any:
        attempts = self._retry_attempts if idempotent else 1
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=0.5, max=self._retry_max_wait),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, json=json)

    async def _send(self, method: str, path: str, *, json: dict[str, Any] | None) -> Any:
        async with httpx.AsyncClient(
            base_url=self._base_url,
            auth=self._auth,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, json=json)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                raise VendorApiError(
                    f"{method} {path} returned HTTP {status}",
                    vendor_status=status,
                    transient=status == 429 or status >= 500,
                ) from exc
            except httpx.HTTPError as exc:
                raise VendorApiError(f"{method} {path} failed: {exc}", transient=True) from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise VendorApiError(f"{method} {path} returned a non-JSON body") from exc
