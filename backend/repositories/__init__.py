"""Persistence layer: tier contracts, tier implementations and the tiered store."""

from .base import (
    ConnectionFailure,
    FallbackTier,
    PrimaryTier,
    QuotaExceeded,
    StorageError,
    StoreConfig,
    TierResult,
    TierStatus,
    TierUnavailable,
    TransactionFailure,
)
from .file_store import FileStore
from .sqlite_tier import SQLiteTier
from .tiered_store import TieredStore


def build_store(config: StoreConfig) -> TieredStore:
    """Wire the SQLite primary (when enabled) and the JSON fallback for config."""
    primary = SQLiteTier(config) if config.primary_enabled else None
    fallback = FileStore(config.fallback_path, quota_bytes=config.fallback_quota_bytes)
    return TieredStore(primary, fallback, config)


__all__ = [
    "ConnectionFailure",
    "FallbackTier",
    "FileStore",
    "PrimaryTier",
    "QuotaExceeded",
    "SQLiteTier",
    "StorageError",
    "StoreConfig",
    "TierResult",
    "TierStatus",
    "TierUnavailable",
    "TieredStore",
    "TransactionFailure",
    "build_store",
]
