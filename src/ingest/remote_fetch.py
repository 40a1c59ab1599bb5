"""Single-resource HTTP download.

This module performs one GET per resource with a bounded retry budget.
Transport errors and transient status codes are retried with
exponential backoff; everything else fails fast.
"""

from __future__ import annotations

import asyncio

import httpx

from core.constants import (
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT,
    HTTP_BACKOFF_SECONDS,
    RETRYABLE_STATUS_CODES,
)
from core.errors import PartonsNetworkError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


async def download(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    retries: int = DEFAULT_HTTP_RETRIES,
) -> bytes:
    """Download the body of ``url``.

    Args:
        url: Absolute resource URL.
        client: Shared client; a short-lived one is created when omitted.
        timeout: Per-request timeout in seconds.
        retries: Extra attempts after the first transient failure.

    Returns:
        Response body.

    Raises:
        PartonsNetworkError: If the request fails or returns a non-success
            status once the retry budget is spent.
    """
    if client is not None:
        return await _download_with_retries(client, url, timeout, retries)
    async with httpx.AsyncClient(follow_redirects=True) as owned_client:
        return await _download_with_retries(owned_client, url, timeout, retries)


async def _download_with_retries(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    retries: int,
) -> bytes:
    attempt = 0
    while True:
        _LOGGER.info("remote_fetch_started", url=url, attempt=attempt)
        try:
            response = await client.get(url, timeout=timeout)
        except httpx.TransportError as error:
            if attempt >= retries:
                raise PartonsNetworkError(
                    f"Failed to download {url}: {error}. "
                    "Check network access and the configured source URL.",
                    url=url,
                ) from error
            await _backoff(url, attempt, reason=type(error).__name__)
            attempt += 1
            continue
        if response.is_success:
            return response.content
        if response.status_code in RETRYABLE_STATUS_CODES and attempt < retries:
            await _backoff(url, attempt, reason=f"status {response.status_code}")
            attempt += 1
            continue
        raise PartonsNetworkError(
            f"Failed to download {url}: server answered {response.status_code}. "
            "Check the set name and the source patterns.",
            url=url,
            status_code=response.status_code,
        )


async def _backoff(url: str, attempt: int, reason: str) -> None:
    delay = HTTP_BACKOFF_SECONDS * (2**attempt)
    _LOGGER.warning("remote_fetch_retry", url=url, attempt=attempt, delay=delay, reason=reason)
    await asyncio.sleep(delay)
