"""
Timed HTTP Fetch Client

This module provides the single outbound request primitive used by every
provider: an async GET with an enforced timeout and normalized failures.

It handles:
- One shared aiohttp ClientSession per client (async context manager)
- Per-call timeout in milliseconds, enforced with asyncio.wait_for so the
  in-flight request is cancelled and the timer released on every exit path
- Mapping of failures onto core.exceptions:
    * no response within the timeout   -> RequestTimeout(timeout_ms)
    * non-2xx status                    -> HttpError(status)
    * connection-level failure          -> NetworkError
    * body is not JSON                  -> InvalidDataError

No retries happen here; callers fall back to the next provider or to the
cached snapshot instead.

Usage:
    async with TimedFetchClient() as client:
        data = await client.fetch_json("https://mempool.space/api/v1/fees/recommended", 5000)
"""

import asyncio
import json
from typing import Any, Optional
from urllib.parse import urlsplit

import aiohttp

from core.exceptions import HttpError, InvalidDataError, NetworkError, RequestTimeout
from core.logging import get_logger, log_api_request, log_api_response


class TimedFetchClient:
    """
    Async HTTP client with per-request timeouts.

    Attributes:
        session: aiohttp ClientSession, created on __aenter__
        logger: Logger instance for debugging

    Example:
        >>> async with TimedFetchClient() as client:
        ...     prices = await client.fetch_json(url, timeout_ms=10_000)

    Notes:
        - Uses context manager for automatic session cleanup
        - Request headers ask for JSON; no API keys are ever sent
    """

    HEADERS = {"Accept": "application/json"}

    def __init__(self):
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """Enter async context - creates HTTP session."""
        self.session = aiohttp.ClientSession(headers=self.HEADERS)
        self.logger.debug("TimedFetchClient session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("TimedFetchClient session closed")

    # ============================================
    # Request Handling
    # ============================================

    async def fetch_json(self, url: str, timeout_ms: int) -> Any:
        """
        GET url and decode the JSON body.

        Args:
            url: Absolute URL
            timeout_ms: Maximum time to wait for the full response

        Returns:
            Decoded JSON body

        Raises:
            RuntimeError: If the session is not open
            RequestTimeout: If no response arrived within timeout_ms
            HttpError: For non-2xx responses
            NetworkError: For connection-level failures
            InvalidDataError: If the body is not valid JSON
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        host = urlsplit(url).netloc or url
        log_api_request(host, url, timeout_ms)

        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            status, data = await asyncio.wait_for(self._get_json(url), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            self.logger.debug(f"Timeout after {timeout_ms}ms on {url}")
            raise RequestTimeout(timeout_ms, url) from None

        log_api_response(host, url, status, loop.time() - started)
        return data

    async def _get_json(self, url: str):
        """Perform the GET; returns (status, decoded body)."""
        try:
            async with self.session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise HttpError(resp.status, resp.reason or "", url)
                try:
                    data = await resp.json(content_type=None)
                except (json.JSONDecodeError, UnicodeDecodeError, aiohttp.ContentTypeError) as e:
                    raise InvalidDataError(f"Response from {url} is not valid JSON: {e}") from e
                return resp.status, data
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error on {url}: {e}", url) from e
        except OSError as e:
            raise NetworkError(f"Network error on {url}: {e}", url) from e
