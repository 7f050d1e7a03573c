"""
WOO X REST API Client

Async HTTP client for the WOO X endpoints used by the volume pipeline.

API Documentation:
    https://docs.woo.org/

Endpoints Used:
    Public:
        - GET /v1/public/info                       Exchange / market info
        - GET /v1/public/market_trades?symbol=...    Recent public trades
    Private (signed, see signing.py):
        - GET /v3/account/info?timestamp=...         Account summary
        - GET /v1/client/trades?...                  Account trade history

Usage:
    async with WooxAPIClient(credential) as client:
        info = await client.get_account_info()
        trades = await client.get_client_trades(query, page=1)
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from core.exceptions import InvalidCredential, MalformedResponse, TransportError
from core.schemas import ApiKeyCredential, Trade, VolumeQuery
from core.utils.numbers import to_decimal
from core.utils.time import current_utc_timestamp, datetime_to_timestamp, to_utc_datetime
from exchanges.rest_client import DEFAULT_TIMEOUT_SECONDS, VenueRESTClient
from exchanges.woox.signing import auth_headers, sign_params

BASE_URL = "https://api.woo.org"


class WooxAPIClient(VenueRESTClient):
    """
    Async HTTP client for the WOO X REST API.

    Attributes:
        credential: API key / secret pair, or None for public-only use

    Notes:
        - Signed requests carry ``timestamp`` in milliseconds
        - ``start_time`` / ``end_time`` are whole seconds
        - Trade rows are normalized into ``Trade``
    """

    exchange = "woox"

    def __init__(
        self,
        credential: Optional[ApiKeyCredential] = None,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS
    ):
        super().__init__(base_url, timeout)
        self.credential = credential

    # ============================================
    # Signed Requests
    # ============================================

    async def _signed_get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        GET a private endpoint with a signed canonical query string.

        Raises:
            InvalidCredential: If no usable key pair is configured
        """
        if not isinstance(self.credential, ApiKeyCredential):
            raise InvalidCredential("WOO X API key and secret are required for authenticated requests")

        query, signature = sign_params(params, self.credential.api_secret.get_secret_value())
        headers = auth_headers(self.credential.api_key, signature)

        return await self._get(f"{path}?{query}", headers=headers)

    # ============================================
    # Public Endpoints
    # ============================================

    async def get_public_info(self) -> Dict[str, Any]:
        """
        Fetch exchange information.

        WOO X Endpoint:
            GET /v1/public/info
        """
        self.logger.info("Fetching WOO X public info")
        payload = await self._get("/v1/public/info")
        return _expect_success(payload, "/v1/public/info")

    async def get_market_trades(self, symbol: str) -> List[Trade]:
        """
        Fetch the most recent public trades of one market.

        WOO X Endpoint:
            GET /v1/public/market_trades?symbol=SPOT_BTC_USDT

        Response Format:
            {
              "success": true,
              "rows": [
                {"symbol": "SPOT_BTC_USDT", "side": "BUY",
                 "executed_price": 46222.35, "executed_quantity": 0.0012,
                 "executed_timestamp": "1641241162.329"}
              ]
            }
        """
        path = "/v1/public/market_trades"
        payload = await self._get(path, params={"symbol": symbol})
        rows = _expect_rows(_expect_success(payload, path), path)
        trades = [_normalize_trade(row, symbol) for row in rows]
        self.logger.info(f"Fetched {len(trades)} public WOO X trades for {symbol}")
        return trades

    # ============================================
    # Private Endpoints
    # ============================================

    async def get_account_info(self) -> Dict[str, Any]:
        """
        Fetch the authenticated account summary.

        WOO X Endpoint:
            GET /v3/account/info?timestamp=...

        Returns:
            The ``data`` object of the response (may lack ``total_volume``)
        """
        path = "/v3/account/info"
        self.logger.info("Fetching WOO X account info")
        payload = _expect_success(
            await self._signed_get(path, {"timestamp": current_utc_timestamp(milliseconds=True)}),
            path
        )
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise MalformedResponse(f"Unexpected 'data' in {path}: {type(data).__name__}")
        return data

    async def get_client_trades(
        self,
        query: VolumeQuery,
        page: Optional[int] = None,
        limit: int = 100
    ) -> List[Trade]:
        """
        Fetch one page of the account's executed trades within ``query``.

        WOO X Endpoint:
            GET /v1/client/trades?end_time=&limit=&page=&start_time=&timestamp=

        Args:
            query: Time range (converted to whole seconds)
            page: Page number from 1; omitted for a single sample page
            limit: Page size
        """
        path = "/v1/client/trades"
        params: Dict[str, Any] = {
            "timestamp": current_utc_timestamp(milliseconds=True),
            "start_time": datetime_to_timestamp(query.start_time),
            "end_time": datetime_to_timestamp(query.end_time),
            "limit": limit,
        }
        if page is not None:
            params["page"] = page

        payload = _expect_success(await self._signed_get(path, params), path)
        rows = _expect_rows(payload, path)
        return [_normalize_trade(row) for row in rows]


# ============================================
# Response Helpers
# ============================================

def _expect_success(payload: Any, path: str) -> Dict[str, Any]:
    """Return the payload if it is a JSON object not flagged as failed."""
    if not isinstance(payload, dict):
        raise MalformedResponse(f"Expected JSON object from {path}, got {type(payload).__name__}")
    if payload.get("success") is False:
        message = payload.get("message") or payload.get("code") or "unknown error"
        raise TransportError(f"WOO X rejected {path}: {message}")
    return payload


def _expect_rows(payload: Dict[str, Any], path: str) -> List[Dict[str, Any]]:
    rows = payload.get("rows") or []
    if not isinstance(rows, list):
        raise MalformedResponse(f"Unexpected 'rows' in {path}: {type(rows).__name__}")
    return rows


def _normalize_trade(row: Any, symbol: Optional[str] = None) -> Trade:
    """
    Normalize a WOO X trade row.

    Client trades use ``executed_price`` / ``executed_quantity``; public
    rows have been seen with both those and plain ``price`` / ``size``.
    """
    if not isinstance(row, dict):
        raise MalformedResponse(f"Unexpected WOO X trade row: {row!r}")

    price = row.get("executed_price", row.get("price"))
    size = row.get("executed_quantity", row.get("size"))
    executed = row.get("executed_timestamp")

    try:
        return Trade(
            price=to_decimal(price),
            size=to_decimal(size),
            executed_at=to_utc_datetime(executed) if executed not in (None, "") else None,
            symbol=row.get("symbol", symbol),
            side=row.get("side"),
        )
    except (ValidationError, ValueError) as e:
        raise MalformedResponse(f"Invalid WOO X trade row: {e}") from e
