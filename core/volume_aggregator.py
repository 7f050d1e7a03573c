"""
Volume Aggregator — Combined, Persisted Volume View

This module produces the per-venue volume overview consumed by the UI.

One aggregation run:
    1. Resolve each venue's credential (store first, then configured
       default, else none; connectors without credentials still run
       their public and degraded tiers)
    2. Fetch every venue's volume concurrently over a shared window
    3. Read prior snapshots (best-effort)
    4. Append one new snapshot per venue (best-effort, independent writes)
    5. Return, per venue: current total, source tier and history
       (current snapshot first, then stored snapshots of that venue)

Windows:
    "full-history" - trailing FULL_HISTORY_DAYS (730)
    "recent"       - trailing RECENT_DAYS (30)

Failure Policy:
    ``aggregate`` never raises. A venue that errors or times out yields its
    own degraded ``error`` result without affecting the other venue;
    snapshot store failures are logged and skipped.

Example Usage:
    aggregator = VolumeAggregator(credential_store, snapshot_store)
    overview = await aggregator.aggregate(RECENT_WINDOW)
    print(overview["woox"].total_volume_usd, overview["woox"].source_tier)
"""

import asyncio
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from pydantic import SecretStr

from core.config import Settings, settings as default_settings
from core.exceptions import TransportError
from core.exchange_interface import ExchangeInterface, describe_error
from core.logging import logger
from core.schemas import (
    ApiKeyCredential,
    Credential,
    PlatformVolume,
    SourceTier,
    TokenCredential,
    VolumeQuery,
    VolumeResult,
    VolumeSnapshot,
)
from core.utils.time import current_utc_datetime
from storage.base import CredentialStore, SnapshotStore

FULL_HISTORY_WINDOW = "full-history"
RECENT_WINDOW = "recent"
WINDOWS = (FULL_HISTORY_WINDOW, RECENT_WINDOW)

ConnectorFactory = Callable[..., ExchangeInterface]


class VolumeAggregator:
    """
    Runs every registered venue connector and merges the results.

    Attributes:
        connectors: Mapping of platform name to connector class/factory,
                    called as ``factory(credential, config=config)``
                    Example: {"woox": WooxExchange, "paradex": ParadexExchange}
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        snapshot_store: SnapshotStore,
        config: Optional[Settings] = None,
        connectors: Optional[Dict[str, ConnectorFactory]] = None
    ):
        self.credential_store = credential_store
        self.snapshot_store = snapshot_store
        self.config = config or default_settings

        if connectors is None:
            # exchanges import core, so import lazily
            from exchanges.woox import WooxExchange
            from exchanges.paradex import ParadexExchange

            connectors = {
                "woox": WooxExchange,
                "paradex": ParadexExchange,
            }

        self.connectors: Dict[str, ConnectorFactory] = connectors
        logger.info(f"VolumeAggregator initialized with venues: {', '.join(self.connectors)}")

    # ============================================
    # Registry
    # ============================================

    def list_platforms(self) -> List[str]:
        return list(self.connectors.keys())

    def has_platform(self, name: str) -> bool:
        return name.lower() in self.connectors

    def window_query(self, window: str = RECENT_WINDOW) -> VolumeQuery:
        """
        Build the query for a named window.

        Raises:
            ValueError: If the window name is unknown
        """
        if window == FULL_HISTORY_WINDOW:
            return VolumeQuery.last_days(self.config.full_history_days)
        if window == RECENT_WINDOW:
            return VolumeQuery.last_days(self.config.recent_days)
        raise ValueError(f"Unknown window '{window}'. Available windows: {', '.join(WINDOWS)}")

    # ============================================
    # Credentials
    # ============================================

    def default_credential(self, platform: str) -> Optional[Credential]:
        """Credential injected through configuration, if any."""
        if platform == "woox" and self.config.woox_default_api_key and self.config.woox_default_api_secret:
            return ApiKeyCredential(
                api_key=self.config.woox_default_api_key,
                api_secret=SecretStr(self.config.woox_default_api_secret),
            )
        if platform == "paradex" and self.config.paradex_default_token:
            return TokenCredential(token=SecretStr(self.config.paradex_default_token))
        return None

    async def resolve_credential(self, platform: str) -> Optional[Credential]:
        """Stored credential, else configured default, else None."""
        credential = None
        try:
            credential = await self.credential_store.get_credential(platform)
        except Exception as e:
            logger.warning(f"Credential lookup for {platform} failed: {e}")

        if credential is not None:
            return credential

        credential = self.default_credential(platform)
        if credential is not None:
            logger.warning(f"No stored {platform} credential, using configured default")
        else:
            logger.warning(f"No {platform} credential available, public data only")
        return credential

    # ============================================
    # Fetching
    # ============================================

    def create_connector(self, platform: str, credential: Optional[Credential]) -> ExchangeInterface:
        """
        Instantiate the connector for ``platform``.

        Raises:
            ValueError: If the platform is not registered
        """
        platform = platform.lower()
        if platform not in self.connectors:
            available = ", ".join(self.connectors.keys())
            raise ValueError(f"Exchange '{platform}' is not supported. Available exchanges: {available}")
        return self.connectors[platform](credential, config=self.config)

    async def fetch_platform_volume(self, platform: str, query: VolumeQuery) -> VolumeResult:
        """
        One venue's volume for ``query``; never raises.

        The whole tier chain is bounded by AGGREGATION_TIMEOUT.
        """
        connector: Optional[ExchangeInterface] = None
        try:
            credential = await self.resolve_credential(platform)
            connector = self.create_connector(platform, credential)
            async with connector:
                return await asyncio.wait_for(
                    connector.get_historical_volume(query),
                    timeout=self.config.aggregation_timeout
                )
        except asyncio.TimeoutError:
            error = TransportError(f"{platform} volume fetch timed out after {self.config.aggregation_timeout:.0f}s")
            logger.error(str(error))
            return self._fallback_result(platform, query, error, connector)
        except Exception as e:
            logger.error(f"Unexpected error fetching {platform} volume: {e}")
            return self._fallback_result(platform, query, e, connector)

    def _fallback_result(
        self,
        platform: str,
        query: VolumeQuery,
        error: BaseException,
        connector: Optional[ExchangeInterface] = None
    ) -> VolumeResult:
        if connector is not None:
            return connector.degraded_result(query, error)
        return VolumeResult(
            exchange=platform,
            total_volume_usd=Decimal("0"),
            source_tier=SourceTier.ERROR,
            range_start=query.start_time,
            range_end=query.end_time,
            error=describe_error(error),
        )

    # ============================================
    # Aggregation
    # ============================================

    async def aggregate(
        self,
        window: str = RECENT_WINDOW,
        query: Optional[VolumeQuery] = None
    ) -> Dict[str, PlatformVolume]:
        """
        Run every venue concurrently and return the combined overview.

        Args:
            window: Named window ("recent" or "full-history")
            query: Explicit range; overrides ``window``

        Returns:
            Dict mapping platform name to PlatformVolume
        """
        query = query or self.window_query(window)
        platforms = self.list_platforms()
        logger.info(f"Aggregating volume for {', '.join(platforms)} ({window}, {query.days_spanned} days)")

        gathered = await asyncio.gather(
            *(self.fetch_platform_volume(platform, query) for platform in platforms),
            return_exceptions=True
        )

        results: Dict[str, VolumeResult] = {}
        for platform, result in zip(platforms, gathered):
            if isinstance(result, BaseException):
                logger.error(f"{platform} volume task failed: {result}")
                result = self._fallback_result(platform, query, result)
            results[platform] = result

        history = await self._load_history()

        captured_at = current_utc_datetime()
        snapshots = {
            platform: VolumeSnapshot(
                platform=platform,
                volume_usd=result.total_volume_usd,
                captured_at=captured_at,
            )
            for platform, result in results.items()
        }
        await self._persist(list(snapshots.values()))

        return {
            platform: PlatformVolume(
                total_volume_usd=result.total_volume_usd,
                source_tier=result.source_tier,
                history=[snapshots[platform]] + [s for s in history if s.platform == platform],
                error=result.error,
            )
            for platform, result in results.items()
        }

    async def _load_history(self) -> List[VolumeSnapshot]:
        try:
            return await self.snapshot_store.list_snapshots(
                limit=self.config.snapshot_history_limit,
                descending=True
            )
        except Exception as e:
            logger.warning(f"Failed to read volume history, continuing without it: {e}")
            return []

    async def _persist(self, snapshots: List[VolumeSnapshot]) -> None:
        outcomes = await asyncio.gather(
            *(self.snapshot_store.append_snapshot(snapshot) for snapshot in snapshots),
            return_exceptions=True
        )
        for snapshot, outcome in zip(snapshots, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Failed to store {snapshot.platform} volume snapshot: {outcome}")

    def __repr__(self) -> str:
        return f"<VolumeAggregator(venues={self.list_platforms()})>"

    def __len__(self) -> int:
        return len(self.connectors)
