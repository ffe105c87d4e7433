"""
Persistence contracts: store config, tier protocols, tier outcomes and errors.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

DEFAULT_FALLBACK_QUOTA_BYTES = 5 * 1024 * 1024  # 5 MB, same ballpark as browser localStorage


@dataclass(frozen=True)
class StoreConfig:
    """Names and capacity policy for one tiered store instance."""

    data_dir: Path
    store_name: str = "chathtml"
    table_name: str = "kv"
    fallback_file: str = "fallback.json"
    fallback_quota_bytes: int = DEFAULT_FALLBACK_QUOTA_BYTES
    primary_enabled: bool = True
    primary_timeout: Optional[float] = None

    @property
    def database_path(self) -> Path:
        return Path(self.data_dir) / f"{self.store_name}.sqlite3"

    @property
    def fallback_path(self) -> Path:
        return Path(self.data_dir) / self.fallback_file


# ── Errors ─────────────────────────────────────────────────────────────

class StorageError(Exception):
    """Base for tier failures with a machine-readable code."""
    def __init__(self, message: str, code: str = "storage_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class TierUnavailable(StorageError):
    def __init__(self, message: str = "Storage tier not available"):
        super().__init__(message, code="tier_unavailable")


class ConnectionFailure(StorageError):
    def __init__(self, message: str = "Failed to open storage tier"):
        super().__init__(message, code="connection_failed")


class TransactionFailure(StorageError):
    def __init__(self, message: str = "Storage transaction failed"):
        super().__init__(message, code="transaction_failed")


class QuotaExceeded(StorageError):
    def __init__(self, message: str = "Storage quota exceeded"):
        super().__init__(message, code="quota_exceeded")


# ── Tier outcomes ──────────────────────────────────────────────────────

class TierStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class TierResult:
    """Outcome of one tier call: value, nothing stored, or failure with reason."""

    status: TierStatus
    value: object = None
    reason: Optional[StorageError] = None

    @classmethod
    def ok(cls, value=None) -> "TierResult":
        return cls(TierStatus.OK, value)

    @classmethod
    def empty(cls) -> "TierResult":
        return cls(TierStatus.EMPTY)

    @classmethod
    def failed(cls, reason: StorageError) -> "TierResult":
        return cls(TierStatus.FAILED, reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.status is not TierStatus.FAILED


# ── Tier protocols ─────────────────────────────────────────────────────

class PrimaryTier(Protocol):
    """Large-capacity async store. Every call opens, runs one transaction, closes."""

    async def get(self, key: str) -> Optional[str]: ...

    async def put(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def all_keys(self) -> list[str]: ...


class FallbackTier(Protocol):
    """Small-capacity synchronous store with positional key enumeration."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def length(self) -> int: ...

    def key(self, index: int) -> Optional[str]: ...
