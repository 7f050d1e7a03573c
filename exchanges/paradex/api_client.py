"""
Paradex REST API Client

Async HTTP client for the Paradex endpoints used by the volume pipeline.

API Documentation:
    https://docs.paradex.trade/

Endpoints Used:
    Public:
        - GET /markets/summary?market=ALL           24h statistics per market
    Private (JWT, ``Authorization: Bearer <token>``):
        - GET /account/info                         Account summary
        - GET /account/list-fills?start_at=&end_at=&page=&page_size=

Token Handling:
    Stored tokens sometimes already include the ``Bearer `` prefix; it is
    stripped once so the header never reads ``Bearer Bearer ...``.

Usage:
    async with ParadexAPIClient(TokenCredential(token=jwt)) as client:
        fills = await client.list_fills(query, page=1)
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from core.exceptions import InvalidCredential, MalformedResponse
from core.schemas import Trade, TokenCredential, VolumeQuery
from core.utils.numbers import to_decimal
from core.utils.time import to_iso8601, to_utc_datetime
from exchanges.rest_client import DEFAULT_TIMEOUT_SECONDS, VenueRESTClient

BASE_URL = "https://api.prod.paradex.trade/v1"
BEARER_PREFIX = "Bearer "
BEARER_PATTERN = re.compile(r"^bearer(?:\s+|$)", re.IGNORECASE)


def normalize_token(token: str) -> str:
    """
    Strip whitespace and a redundant leading ``Bearer`` (any case) from a JWT.

    Raises:
        InvalidCredential: If nothing usable remains

    Example:
        >>> normalize_token("Bearer eyJhbGciOi...")
        'eyJhbGciOi...'
    """
    token = (token or "").strip()
    token = BEARER_PATTERN.sub("", token, count=1).strip()
    if not token:
        raise InvalidCredential("Paradex JWT token is required for authenticated requests")
    return token


class ParadexAPIClient(VenueRESTClient):
    """
    Async HTTP client for the Paradex REST API.

    Attributes:
        credential: TokenCredential, or None for public-only use
    """

    exchange = "paradex"

    def __init__(
        self,
        credential: Optional[TokenCredential] = None,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ):
        super().__init__(base_url, timeout)
        self.credential = credential

    def _auth_headers(self) -> Dict[str, str]:
        if not isinstance(self.credential, TokenCredential):
            raise InvalidCredential("Paradex JWT token is required for authenticated requests")
        token = normalize_token(self.credential.token.get_secret_value())
        return {"Authorization": f"{BEARER_PREFIX}{token}"}

    # ============================================
    # Public Endpoints
    # ============================================

    async def get_markets_summary(self) -> List[Dict[str, Any]]:
        """
        Fetch 24h statistics for every market.

        Paradex Endpoint:
            GET /markets/summary?market=ALL

        Response Format:
            {
              "results": [
                {"symbol": "BTC-USD-PERP", "volume_24h": "1234567.8",
                 "last_traded_price": "43000.1", ...}
              ]
            }

        Returns:
            List of per-market summary objects
        """
        path = "/markets/summary"
        self.logger.info("Fetching Paradex market summary")
        payload = await self._get(path, params={"market": "ALL"})

        if not isinstance(payload, dict):
            raise MalformedResponse(f"Expected JSON object from {path}, got {type(payload).__name__}")

        markets = payload.get("results")
        if markets is None:
            markets = payload.get("markets")
        if not isinstance(markets, list):
            raise MalformedResponse(f"No market list in {path} response")

        self.logger.info(f"Fetched summaries for {len(markets)} Paradex markets")
        return markets

    # ============================================
    # Private Endpoints
    # ============================================

    async def get_account_info(self) -> Dict[str, Any]:
        """
        Fetch the authenticated account summary.

        Paradex Endpoint:
            GET /account/info
        """
        path = "/account/info"
        self.logger.info("Fetching Paradex account info")
        payload = await self._get(path, headers=self._auth_headers())
        if not isinstance(payload, dict):
            raise MalformedResponse(f"Expected JSON object from {path}, got {type(payload).__name__}")
        return payload

    async def list_fills(
        self,
        query: VolumeQuery,
        page: Optional[int] = None,
        page_size: int = 100
    ) -> List[Trade]:
        """
        Fetch one page of the account's fills within ``query``.

        Paradex Endpoint:
            GET /account/list-fills?start_at=&end_at=&page=&page_size=

        Response Format:
            {
              "results": [
                {"market": "BTC-USD-PERP", "side": "BUY", "price": "43000.1",
                 "size": "0.05", "created_at": 1681375176910}
              ]
            }
        """
        path = "/account/list-fills"
        params: Dict[str, Any] = {
            "start_at": to_iso8601(query.start_time),
            "end_at": to_iso8601(query.end_time),
            "page_size": page_size,
        }
        if page is not None:
            params["page"] = page

        payload = await self._get(path, params=params, headers=self._auth_headers())
        if not isinstance(payload, dict):
            raise MalformedResponse(f"Expected JSON object from {path}, got {type(payload).__name__}")

        results = payload.get("results") or []
        if not isinstance(results, list):
            raise MalformedResponse(f"Unexpected 'results' in {path}: {type(results).__name__}")

        return [_normalize_fill(fill) for fill in results]


def _normalize_fill(fill: Any) -> Trade:
    if not isinstance(fill, dict):
        raise MalformedResponse(f"Unexpected Paradex fill: {fill!r}")

    created = fill.get("created_at")
    try:
        return Trade(
            price=to_decimal(fill.get("price")),
            size=to_decimal(fill.get("size")),
            executed_at=to_utc_datetime(created) if created not in (None, "") else None,
            symbol=fill.get("market"),
            side=fill.get("side"),
        )
    except (ValidationError, ValueError) as e:
        raise MalformedResponse(f"Invalid Paradex fill: {e}") from e
