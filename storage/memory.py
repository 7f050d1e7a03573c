"""
In-memory stores.

Used when no Supabase project is configured, and throughout the tests.
History lives only as long as the process.
"""

from typing import Dict, List, Optional

from core.schemas import Credential, Platform, VolumeSnapshot
from storage.base import CredentialStore, SnapshotStore


class InMemoryCredentialStore(CredentialStore):
    """Credentials held in a plain dict keyed by platform."""

    def __init__(self, credentials: Optional[Dict[str, Credential]] = None):
        self._credentials: Dict[str, Credential] = dict(credentials or {})

    async def get_credential(self, platform: Platform) -> Optional[Credential]:
        return self._credentials.get(platform)


class InMemorySnapshotStore(SnapshotStore):
    """Snapshots kept in insertion order, sorted on read."""

    def __init__(self, snapshots: Optional[List[VolumeSnapshot]] = None):
        self._snapshots: List[VolumeSnapshot] = list(snapshots or [])

    async def list_snapshots(self, limit: int = 100, descending: bool = True) -> List[VolumeSnapshot]:
        ordered = sorted(self._snapshots, key=lambda s: s.captured_at, reverse=descending)
        return ordered[:limit]

    async def append_snapshot(self, snapshot: VolumeSnapshot) -> None:
        self._snapshots.append(snapshot)

    def __len__(self) -> int:
        return len(self._snapshots)
