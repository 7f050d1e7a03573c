"""
Paradex Volume Connector

Implements ExchangeInterface for Paradex.

Volume Tiers (tried in order):
    1. account-summary   (authenticated)
       GET /account/info; ``account.total_volume_usd`` is authoritative.
       A small page of fills (PARADEX_SAMPLE_PAGE_SIZE, default 20) is
       fetched for display.
    2. fill-aggregation  (authenticated)
       Paginates GET /account/list-fills over the query range and sums
       price × size.
    3. public-estimate
       One GET /markets/summary?market=ALL. Per market the daily figure is
       ``volume_24h``, or ``last_price × base_volume`` when no volume is
       reported. The all-market sum is projected:

           total = daily × days_spanned × PARADEX_PUBLIC_VOLUME_MULTIPLIER (1)

When all three fail the base class returns the degraded placeholder.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.config import Settings
from core.exceptions import MalformedResponse
from core.exchange_interface import ExchangeInterface, VolumeTier
from core.pagination import PaginatedFetcher
from core.schemas import Credential, SourceTier, TokenCredential, Trade, VolumeQuery, VolumeResult
from core.utils.numbers import to_decimal
from .api_client import ParadexAPIClient, normalize_token


class ParadexExchange(ExchangeInterface):
    """
    Paradex connector.

    Args:
        credential: TokenCredential, or None to go straight to public data
        config: Settings override (tests)
        client: Pre-built API client (tests); built from config otherwise
    """

    name = "paradex"

    def __init__(
        self,
        credential: Optional[Credential] = None,
        config: Optional[Settings] = None,
        client: Optional[ParadexAPIClient] = None
    ):
        super().__init__(credential, config)

        token_credential = credential if isinstance(credential, TokenCredential) else None
        self.client = client or ParadexAPIClient(
            token_credential,
            base_url=self.config.paradex_base_url,
            timeout=self.config.request_timeout
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        await self.client.__aenter__()
        self.logger.debug("Paradex connector initialized")

    async def shutdown(self) -> None:
        await self.client.__aexit__(None, None, None)
        self.logger.debug("Paradex connector shut down")

    # ============================================
    # ExchangeInterface
    # ============================================

    async def get_market_summary(self) -> List[Dict[str, Any]]:
        """All-market 24h summary (GET /markets/summary?market=ALL)."""
        return await self.client.get_markets_summary()

    @property
    def placeholder_ceiling(self) -> float:
        return self.config.paradex_placeholder_ceiling

    def volume_tiers(self) -> List[VolumeTier]:
        return [
            VolumeTier("account-summary", self._account_summary_tier, requires_auth=True),
            VolumeTier("fill-aggregation", self._fill_aggregation_tier, requires_auth=True),
            VolumeTier("public-estimate", self._public_estimate_tier),
        ]

    # ============================================
    # Tiers
    # ============================================

    async def _account_summary_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        info = await self.client.get_account_info()

        account = info.get("account")
        if not isinstance(account, dict):
            account = info

        if account.get("total_volume_usd") is None:
            raise MalformedResponse("Paradex account info has no total_volume_usd field")

        total = to_decimal(account["total_volume_usd"])
        self.logger.info(f"Paradex account total volume: {total}")

        try:
            sample = await self.client.list_fills(query, page_size=self.config.paradex_sample_page_size)
        except Exception as e:
            self.logger.warning(f"Paradex fill sample unavailable: {e}")
            sample = []

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=total,
            sample_trades=sample,
            source_tier=SourceTier.AUTHENTICATED,
            range_start=query.start_time,
            range_end=query.end_time,
        )

    async def _fill_aggregation_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        async def fetch_page(page: int, page_size: int) -> List[Trade]:
            return await self.client.list_fills(query, page=page, page_size=page_size)

        fetcher = PaginatedFetcher(
            fetch_page,
            page_size=self.config.page_size,
            max_pages=self.config.max_pages,
            label="Paradex fills"
        )
        fills = await fetcher.fetch_all()

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=sum((fill.notional for fill in fills), Decimal("0")),
            sample_trades=fills,
            source_tier=SourceTier.AUTHENTICATED,
            range_start=query.start_time,
            range_end=query.end_time,
        )

    async def _public_estimate_tier(self, query: VolumeQuery, credential: Optional[Credential]) -> VolumeResult:
        markets = await self.client.get_markets_summary()

        daily_volume = sum((market_daily_volume(m) for m in markets), Decimal("0"))
        days = query.days_spanned
        multiplier = Decimal(str(self.config.paradex_public_volume_multiplier))

        self.logger.info(f"Paradex all-market 24h volume: {daily_volume} over {len(markets)} markets")

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=daily_volume * multiplier * days,
            sample_trades=[],
            source_tier=SourceTier.PUBLIC,
            range_start=query.start_time,
            range_end=query.end_time,
            estimated_days=days,
        )


def market_daily_volume(market: Any) -> Decimal:
    """
    24h USD volume of one market summary.

    Uses ``volume_24h`` when present, otherwise ``last_price × base_volume``;
    zero when neither is available.
    """
    if not isinstance(market, dict):
        return Decimal("0")

    if market.get("volume_24h") not in (None, ""):
        return to_decimal(market["volume_24h"])

    if market.get("last_price") not in (None, "") and market.get("base_volume") not in (None, ""):
        return to_decimal(market["last_price"]) * to_decimal(market["base_volume"])

    return Decimal("0")


__all__ = ["ParadexExchange", "ParadexAPIClient", "normalize_token"]
