"""
Exchange Interface — Abstract Contract for Volume Connectors

This module defines the abstract base class that both venue connectors
(WOO X and Paradex) implement, together with the single tier-iteration
driver they share.

Design Philosophy:
    Each connector only declares *what* its tiers are; *how* tiers are tried,
    skipped and degraded lives here, once.

Tier Chain:
    A connector returns an ordered list of ``VolumeTier`` entries from
    ``volume_tiers()``. ``get_historical_volume`` walks that list:

    1. Each tier gets exactly one attempt (no retry, no backoff).
    2. ``InvalidCredential`` from an authenticated tier skips every remaining
       authenticated tier; the walk continues at the first public tier.
    3. Any other exception falls through to the next tier.
    4. When every tier has failed, ``degraded_result`` produces a placeholder
       tagged ``SourceTier.ERROR`` with the last error attached.

    No state survives between calls: each call starts again at tier 1.

Example:
    class WooxExchange(ExchangeInterface):
        name = "woox"

        def volume_tiers(self):
            return [
                VolumeTier("account-summary", self._account_summary_tier, requires_auth=True),
                VolumeTier("trade-aggregation", self._trade_aggregation_tier, requires_auth=True),
                VolumeTier("public-estimate", self._public_estimate_tier),
            ]

    async with WooxExchange(credential) as exchange:
        result = await exchange.get_historical_volume(VolumeQuery.last_days(30))
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Awaitable, Callable, List, Optional

from core.config import Settings, settings as default_settings
from core.exceptions import InvalidCredential
from core.logging import get_logger
from core.schemas import Credential, SourceTier, VolumeQuery, VolumeResult

TierFetch = Callable[[VolumeQuery, Optional[Credential]], Awaitable[VolumeResult]]


@dataclass(frozen=True)
class VolumeTier:
    """
    One strategy in a connector's fallback chain.

    Attributes:
        name: Short identifier used in logs
        fetch: Coroutine function ``(query, credential) -> VolumeResult``;
               raises to signal failure
        requires_auth: True for tiers that call private endpoints
    """

    name: str
    fetch: TierFetch
    requires_auth: bool = False


class ExchangeInterface(ABC):
    """
    Abstract Base Class for Volume Connectors

    Class Attributes:
        name: Venue identifier (lowercase, e.g. "woox", "paradex")

    Abstract Methods:
        - get_market_summary: Public market data for the venue
        - volume_tiers: Ordered tier list for get_historical_volume

    Lifecycle:
        Connectors own an HTTP client; open it with ``initialize()`` (or
        ``async with``) and close it with ``shutdown()``.
    """

    name: str

    def __init__(self, credential: Optional[Credential] = None, config: Optional[Settings] = None):
        self.credential = credential
        self.config = config or default_settings
        self.logger = get_logger(f"exchanges.{self.name}")

    # ============================================
    # Venue-specific contract
    # ============================================

    @abstractmethod
    async def get_market_summary(self) -> Any:
        """
        Fetch public market data for the venue.

        Raises:
            TransportError: If the venue cannot be reached or answers badly
        """
        ...

    @abstractmethod
    def volume_tiers(self) -> List[VolumeTier]:
        """Ordered fallback chain, most trusted first."""
        ...

    @property
    def placeholder_ceiling(self) -> float:
        """Upper bound of the random degraded placeholder."""
        return 0.0

    # ============================================
    # Tier driver
    # ============================================

    async def get_historical_volume(self, query: Optional[VolumeQuery] = None) -> VolumeResult:
        """
        Return the best volume figure obtainable for ``query``.

        Never raises for venue or credential problems: the worst case is a
        degraded result tagged ``SourceTier.ERROR``.

        Args:
            query: Time range; defaults to the trailing 730 days

        Returns:
            VolumeResult from the first tier that succeeds
        """
        query = query or VolumeQuery()
        self.logger.info(
            f"Fetching {self.name} volume from {query.start_time.isoformat()} "
            f"to {query.end_time.isoformat()}"
        )

        last_error: Optional[BaseException] = None
        skip_authenticated = False

        for tier in self.volume_tiers():
            if tier.requires_auth and skip_authenticated:
                self.logger.debug(f"{self.name}: skipping {tier.name} (credential rejected)")
                continue

            try:
                result = await tier.fetch(query, self.credential)
            except InvalidCredential as e:
                last_error = e
                if tier.requires_auth:
                    skip_authenticated = True
                self.logger.warning(f"{self.name}: {tier.name} tier rejected credential: {e}")
                continue
            except Exception as e:
                last_error = e
                self.logger.warning(f"{self.name}: {tier.name} tier failed, falling through: {e}")
                continue

            self.logger.info(
                f"{self.name}: {tier.name} tier succeeded "
                f"({result.source_tier.value}, {result.total_volume_usd} USD)"
            )
            return result

        return self.degraded_result(query, last_error)

    def degraded_result(self, query: VolumeQuery, error: Optional[BaseException] = None) -> VolumeResult:
        """
        Build the terminal placeholder result.

        The placeholder follows ``degraded_volume_mode``: a uniform random
        value below ``placeholder_ceiling``, or zero. It is always tagged
        ``SourceTier.ERROR`` so consumers can tell it apart from real data.
        """
        if self.config.degraded_volume_mode == "random" and self.placeholder_ceiling > 0:
            placeholder = Decimal(str(round(random.uniform(0, self.placeholder_ceiling), 2)))
        else:
            placeholder = Decimal("0")

        message = describe_error(error) if error else "All volume tiers failed"
        self.logger.error(f"{self.name}: every volume tier failed, returning placeholder ({message})")

        return VolumeResult(
            exchange=self.name,
            total_volume_usd=placeholder,
            sample_trades=[],
            source_tier=SourceTier.ERROR,
            range_start=query.start_time,
            range_end=query.end_time,
            error=message,
        )

    # ============================================
    # Lifecycle
    # ============================================

    async def initialize(self) -> None:
        """Open network resources. Default implementation does nothing."""
        pass

    async def shutdown(self) -> None:
        """Release network resources. Default implementation does nothing."""
        pass

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    def __repr__(self) -> str:
        """String representation of the connector (credential omitted)."""
        return f"<{self.__class__.__name__}(name='{self.name}')>"


def describe_error(error: BaseException) -> str:
    """Human-readable one-line description of an exception."""
    text = str(error)
    return f"{type(error).__name__}: {text}" if text else type(error).__name__
