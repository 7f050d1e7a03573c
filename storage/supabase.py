"""
Supabase Stores

Credential and snapshot stores backed by a Supabase project, talking to its
PostgREST endpoint (``{SUPABASE_URL}/rest/v1``) with httpx.

Tables:
    api_keys           (platform, api_key, api_secret, created_at)
    jwt_tokens         (platform, token, created_at)
    historical_volume  (platform, volume_usd, timestamp)

Every HTTP or decoding failure is raised as PersistenceError.
"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import SecretStr, ValidationError

from core.exceptions import PersistenceError
from core.logging import get_logger
from core.schemas import ApiKeyCredential, Credential, Platform, TokenCredential, VolumeSnapshot
from storage.base import CredentialStore, SnapshotStore

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class SupabaseClient:
    """
    Minimal PostgREST client.

    Example:
        >>> client = SupabaseClient("https://xyz.supabase.co", key)
        >>> rows = await client.select("historical_volume", {"order": "timestamp.desc", "limit": 5})
    """

    def __init__(self, url: str, key: str, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        if not url or not key:
            raise ValueError("Supabase URL and key are required")
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.rest_url}/{table}", params=params, headers=self._headers)
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(f"Supabase select on {table} failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise PersistenceError(f"Supabase select on {table} failed: {e}") from e
        except ValueError as e:
            raise PersistenceError(f"Supabase select on {table} returned invalid JSON") from e

        if not isinstance(rows, list):
            raise PersistenceError(f"Supabase select on {table} returned {type(rows).__name__}")
        return rows

    async def insert(self, table: str, row: Dict[str, Any]) -> None:
        headers = {**self._headers, "Prefer": "return=minimal"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.rest_url}/{table}", json=row, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(f"Supabase insert into {table} failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise PersistenceError(f"Supabase insert into {table} failed: {e}") from e


class SupabaseCredentialStore(CredentialStore):
    """
    Reads WOO X key pairs from ``api_keys`` and Paradex JWTs from
    ``jwt_tokens``. Empty or missing rows yield None.
    """

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def get_credential(self, platform: Platform) -> Optional[Credential]:
        if platform == "woox":
            rows = await self.client.select("api_keys", {
                "select": "api_key,api_secret",
                "platform": "eq.woox",
                "limit": 1,
            })
            if not rows or not rows[0].get("api_key") or not rows[0].get("api_secret"):
                return None
            return ApiKeyCredential(api_key=rows[0]["api_key"], api_secret=SecretStr(rows[0]["api_secret"]))

        if platform == "paradex":
            rows = await self.client.select("jwt_tokens", {
                "select": "token",
                "platform": "eq.paradex",
                "order": "created_at.desc",
                "limit": 1,
            })
            if not rows or not rows[0].get("token"):
                return None
            return TokenCredential(token=SecretStr(rows[0]["token"]))

        return None


class SupabaseSnapshotStore(SnapshotStore):
    """Volume history in ``historical_volume``."""

    table = "historical_volume"

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def list_snapshots(self, limit: int = 100, descending: bool = True) -> List[VolumeSnapshot]:
        rows = await self.client.select(self.table, {
            "select": "platform,volume_usd,timestamp",
            "order": f"timestamp.{'desc' if descending else 'asc'}",
            "limit": limit,
        })

        snapshots = []
        for row in rows:
            try:
                snapshots.append(VolumeSnapshot(
                    platform=row.get("platform"),
                    volume_usd=row.get("volume_usd"),
                    captured_at=row.get("timestamp"),
                ))
            except ValidationError as e:
                logger.warning(f"Skipping invalid {self.table} row: {e.error_count()} error(s)")
        return snapshots

    async def append_snapshot(self, snapshot: VolumeSnapshot) -> None:
        await self.client.insert(self.table, {
            "platform": snapshot.platform,
            "volume_usd": float(snapshot.volume_usd),
            "timestamp": snapshot.captured_at.isoformat(),
        })
