"""
WOO X Volume Connector

Implements ExchangeInterface for WOO X.

Volume Tiers (tried in order):
    1. account-summary   (authenticated)
       GET /v3/account/info; ``data.total_volume`` is authoritative.
       One page of recent trades is fetched for display.
    2. trade-aggregation (authenticated)
       Paginates GET /v1/client/trades over the query range and sums
       executed_price × executed_quantity.
    3. public-estimate
       Sums price × size of recent public trades of the sampled markets
       (default SPOT_BTC_USDT, SPOT_ETH_USDT, PERP_BTC_USDT) as a daily
       figure, then projects it:

           total = daily × days_spanned × WOOX_PUBLIC_VOLUME_MULTIPLIER (10)

       The multiplier scales three sampled markets up to the whole
       exchange. It is a rough heuristic, not a measurement.

When all three fail the base class returns the degraded placeholder.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.config import Settings
from core.exceptions import MalformedResponse, TransportError, VolumeError
from core.exchange_interface import ExchangeInterface, VolumeTier
from core.pagination import PaginatedFetcher
from core.schemas import ApiKeyCredential, Credential, SourceTier, Trade, VolumeQuery, VolumeResult
from core.utils.numbers import to_decimal
from .api_client import WooxAPIClient


class WooxExchange(ExchangeInterface):
    """
    WOO X connector.

    Args:
        credential: ApiKeyCredential, or None to go straight to public data
        config: Settings override (tests)
        client: Pre-built API client (tests); built from config otherwise

    Example:
        >>> async with WooxExchange(ApiKeyCredential(api_key="k", api_secret="s")) as woox:
        ...     result = await woox.get_historical_volume(VolumeQuery.last_days(30))
        ...     print(result.source_tier, result.total_volume_usd)
    """

    name = "woox"

    def __init__(
        self,
        credential: Optional[Credential] = None,
        config: Optional[Settings] = None,
        client: Optional[WooxAPIClient] = None
    ):
        super().__init__(credential, config)

        api_credential = credential if isinstance(credential, ApiKeyCredential) else None
        self.client = client or WooxAPIClient(
            api_credential,
            base_url=self.config.woox_base_url,
            timeout=self.config.request_timeout
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        await self.client.__aenter__()
        self.logger.debug("WOO X connector initialized")

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.debug("WOO X connector shut down")

    # ============================================
    # ExchangeInterface
    # ============================================

    async def get_market_summary(self) -> Dict[str, Any]:
        """Public exchange info (GET /v1/public/info)."""
        return await self.client.get_public_info()

    @property
    def placeholder_ceiling(self) -> float:
        return self.config.woox_placeholder_ceiling

    def volume_tiers(self) -> List[VolumeTier]:
        return [
            VolumeTier("account-summary", self._account_summary_tier, requires_auth=True),
            VolumeTier("trade-aggregation", self._trade_aggregation_tier, requires_auth=True),
            VolumeTier("public-estimate", self._public_estimate_tier),
        ]

    # ============================================
    # Tiers
    # ============================================

    async def _account_summary_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        account = await self.client.get_account_info()

        if account.get("total_volume") is None:
            raise MalformedResponse("WOO X account info has no total_volume field")

        total = to_decimal(account["total_volume"])
        self.logger.info(f"WOO X account total volume: {total}")

        try:
            sample = await self.client.get_client_trades(query, limit=self.config.page_size)
        except Exception as e:
            self.logger.warning(f"WOO X trade sample unavailable: {e}")
            sample = []

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=total,
            sample_trades=sample,
            source_tier=SourceTier.AUTHENTICATED,
            range_start=query.start_time,
            range_end=query.end_time,
        )

    async def _trade_aggregation_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        async def fetch_page(page: int, page_size: int) -> List[Trade]:
            return await self.client.get_client_trades(query, page=page, limit=page_size)

        fetcher = PaginatedFetcher(
            fetch_page,
            page_size=self.config.page_size,
            max_pages=self.config.max_pages,
            label="WOO X trades"
        )
        trades = await fetcher.fetch_all()

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=sum((trade.notional for trade in trades), Decimal("0")),
            sample_trades=trades,
            source_tier=SourceTier.AUTHENTICATED,
            range_start=query.start_time,
            range_end=query.end_time,
        )

    async def _public_estimate_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        daily_volume = Decimal("0")
        all_trades: List[Trade] = []
        failures = []

        for market in self.config.woox_markets_list:
            try:
                trades = await self.client.get_market_trades(market)
            except VolumeError as e:
                self.logger.warning(f"WOO X public trades unavailable for {market}: {e}")
                failures.append(f"{market}: {e}")
                continue

            market_volume = sum((trade.notional for trade in trades), Decimal("0"))
            self.logger.debug(f"{market} 24h volume estimate: {market_volume}")
            daily_volume += market_volume
            all_trades.extend(trades)

        if len(failures) == len(self.config.woox_markets_list):
            raise TransportError("No WOO X public market data available (" + "; ".join(failures) + ")")

        days = query.days_spanned
        multiplier = Decimal(str(self.config.woox_public_volume_multiplier))

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=daily_volume * multiplier * days,
            sample_trades=all_trades[:self.config.woox_sample_size],
            source_tier=SourceTier.PUBLIC,
            range_start=query.start_time,
            range_end=query.end_time,
            estimated_days=days,
        )


__all__ = ["WooxExchange", "WooxAPIClient"]
