"""
Venue REST Transport

Shared aiohttp plumbing for the WOO X and Paradex API clients:
- Session lifecycle (async context manager)
- A bounded per-request timeout
- Mapping of HTTP outcomes onto the pipeline's error taxonomy

Status Mapping:
    200-299        -> parsed JSON body
    401, 403       -> InvalidCredential
    other statuses -> TransportError (status attached)
    timeout / connection failure -> TransportError
    body that is not JSON        -> MalformedResponse

Each request is attempted once; the connector's tier
chain is what reacts to failures.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from core.exceptions import InvalidCredential, MalformedResponse, TransportError
from core.logging import get_logger, log_api_request, log_api_response

DEFAULT_TIMEOUT_SECONDS = 10.0


class VenueRESTClient:
    """
    Base async HTTP client for one venue.

    Subclasses set ``exchange`` and build on ``_get``.

    Example:
        >>> async with WooxAPIClient(credential) as client:
        ...     info = await client.get_public_info()
    """

    exchange: str = "venue"

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger(f"exchanges.{self.exchange}.api_client")
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        self.session = aiohttp.ClientSession()
        self.logger.debug(f"{self.__class__.__name__} session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug(f"{self.__class__.__name__} session closed")

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Make a single GET request and return the decoded JSON body.

        Args:
            path: Endpoint path, optionally with a pre-built query string
            params: Query parameters (omit when ``path`` already has them)
            headers: Extra headers (authentication)

        Raises:
            RuntimeError: If the session was not opened
            InvalidCredential: On 401/403
            TransportError: On other HTTP errors, timeouts, connection failures
            MalformedResponse: If the body is not JSON
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        url = f"{self.base_url}{path}"

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        log_api_request(self.exchange, path, params)
        started = time.monotonic()

        try:
            async with self.session.get(
                url,
                params=params,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                log_api_response(self.exchange, path, resp.status, time.monotonic() - started)

                if resp.status in (401, 403):
                    text = await resp.text()
                    raise InvalidCredential(f"HTTP {resp.status} on {path}: {text[:200]}")

                if not 200 <= resp.status < 300:
                    text = await resp.text()
                    raise TransportError(f"HTTP {resp.status} on {path}: {text[:200]}", status=resp.status)

                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponse(f"Non-JSON response on {path}", status=resp.status) from e

        except asyncio.TimeoutError as e:
            raise TransportError(f"Timeout on {path} after {self.timeout:.1f}s") from e

        except aiohttp.ClientError as e:
            raise TransportError(f"Request failed on {path}: {e}") from e
