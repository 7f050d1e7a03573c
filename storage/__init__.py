"""
Storage Package

Credential lookup and volume snapshot history.

Current implementations:
- In-memory stores (default, and for tests)
- Supabase stores (PostgREST over httpx) when SUPABASE_URL / SUPABASE_KEY are set

The pipeline only depends on the CredentialStore / SnapshotStore interfaces,
so backends can be swapped without touching connectors or the aggregator.
"""

from typing import Tuple

from core.config import Settings, settings as default_settings
from storage.base import CredentialStore, SnapshotStore
from storage.memory import InMemoryCredentialStore, InMemorySnapshotStore
from storage.supabase import SupabaseClient, SupabaseCredentialStore, SupabaseSnapshotStore


def create_stores(config: Settings = None) -> Tuple[CredentialStore, SnapshotStore]:
    """Build the configured credential and snapshot stores."""
    config = config or default_settings

    if config.use_supabase:
        client = SupabaseClient(config.supabase_url, config.supabase_key, timeout=config.request_timeout)
        return SupabaseCredentialStore(client), SupabaseSnapshotStore(client)

    return InMemoryCredentialStore(), InMemorySnapshotStore()


__all__ = [
    "CredentialStore",
    "SnapshotStore",
    "InMemoryCredentialStore",
    "InMemorySnapshotStore",
    "SupabaseClient",
    "SupabaseCredentialStore",
    "SupabaseSnapshotStore",
    "create_stores",
]
