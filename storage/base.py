"""
Storage Interfaces

The volume pipeline only needs two tiny contracts from the outside world:

- CredentialStore: read-only lookup of venue key material by platform
- SnapshotStore:   append-only history of per-venue volume snapshots

Implementations raise PersistenceError for any backend failure; callers in
the pipeline decide whether that is fatal (it never is for aggregation).
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from core.schemas import Credential, Platform, VolumeSnapshot


class CredentialStore(ABC):
    """Read-only credential lookup."""

    @abstractmethod
    async def get_credential(self, platform: Platform) -> Optional[Credential]:
        """
        Return the stored credential for ``platform``, or None if absent.

        Raises:
            PersistenceError: If the backend cannot be read
        """
        ...


class SnapshotStore(ABC):
    """Append-only volume snapshot history."""

    @abstractmethod
    async def list_snapshots(self, limit: int = 100, descending: bool = True) -> List[VolumeSnapshot]:
        """
        Return up to ``limit`` snapshots ordered by ``captured_at``
        (newest first when ``descending``).

        Raises:
            PersistenceError: If the backend cannot be read
        """
        ...

    @abstractmethod
    async def append_snapshot(self, snapshot: VolumeSnapshot) -> None:
        """
        Append one snapshot.

        Raises:
            PersistenceError: If the write fails
        """
        ...
