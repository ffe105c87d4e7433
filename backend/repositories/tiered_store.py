"""
Tiered key-value store.

Prefers the large async primary tier and falls back to the small sync
fallback tier. Tier failures never reach callers: reads degrade to None
or [], writes and deletes complete quietly. Persistence is best-effort;
the editor must keep working when both tiers are gone.

Tier calls are wrapped into TierResult values and every public operation
decides fallback vs. give-up by looking at the result status.
"""

import asyncio
import logging
from typing import Iterable, Optional

from .base import (
    FallbackTier,
    PrimaryTier,
    StorageError,
    StoreConfig,
    TierResult,
    TierStatus,
    TierUnavailable,
    TransactionFailure,
)

logger = logging.getLogger(__name__)

# Only reads may time out. A timed-out put/delete keeps running in its worker
# thread and could commit after a newer write.
_TIMED_OPS = ("get", "all_keys")


class TieredStore:
    """get / set / remove / keys_with_prefix / migrate_key over two tiers."""

    def __init__(
        self,
        primary: Optional[PrimaryTier],
        fallback: Optional[FallbackTier],
        config: Optional[StoreConfig] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.config = config
        self.primary_timeout = config.primary_timeout if config else None

    # ── Tier wrappers ──────────────────────────────────────────────────

    async def _primary(self, op: str, *args) -> TierResult:
        if self.primary is None:
            return TierResult.failed(TierUnavailable("No primary tier configured"))
        try:
            call = getattr(self.primary, op)(*args)
            if self.primary_timeout and op in _TIMED_OPS:
                value = await asyncio.wait_for(call, self.primary_timeout)
            else:
                value = await call
        except asyncio.TimeoutError:
            return TierResult.failed(
                TierUnavailable(f"Primary {op} timed out after {self.primary_timeout}s")
            )
        except StorageError as e:
            return TierResult.failed(e)
        except Exception as e:
            return TierResult.failed(TransactionFailure(f"Primary {op} failed: {e}"))
        if op == "get" and value is None:
            return TierResult.empty()
        return TierResult.ok(value)

    def _fallback(self, op: str, *args) -> TierResult:
        if self.fallback is None:
            return TierResult.failed(TierUnavailable("No fallback tier configured"))
        try:
            value = getattr(self.fallback, op)(*args)
        except StorageError as e:
            return TierResult.failed(e)
        except Exception as e:
            return TierResult.failed(TransactionFailure(f"Fallback {op} failed: {e}"))
        if op == "get_item" and value is None:
            return TierResult.empty()
        return TierResult.ok(value)

    # ── Public operations ──────────────────────────────────────────────

    async def get(self, key: str) -> Optional[str]:
        result = await self._primary("get", key)
        if result.status is TierStatus.OK:
            return result.value
        if result.status is TierStatus.FAILED:
            logger.debug("get(%s): primary failed (%s), reading fallback", key, result.reason.code)

        result = self._fallback("get_item", key)
        if result.status is TierStatus.FAILED:
            logger.warning("get(%s): fallback failed: %s", key, result.reason)
            return None
        return result.value

    async def set(self, key: str, value: str) -> bool:
        """Persist value. Returns False when nothing could be written."""
        result = await self._primary("put", key, value)
        if result.succeeded:
            return True
        logger.debug("set(%s): primary failed (%s), writing fallback", key, result.reason.code)

        result = self._fallback("set_item", key, value)
        if result.succeeded:
            return True
        logger.warning("Failed to persist '%s' to fallback storage: %s", key, result.reason)
        return False

    async def remove(self, key: str) -> None:
        result = await self._primary("delete", key)
        if not result.succeeded:
            logger.debug("remove(%s): primary failed (%s)", key, result.reason.code)
        result = self._fallback("remove_item", key)
        if not result.succeeded:
            logger.debug("remove(%s): fallback failed (%s)", key, result.reason.code)

    async def keys_with_prefix(self, prefix: str) -> list[str]:
        # Primary keys only when the primary answers; the two tiers are never merged.
        result = await self._primary("all_keys")
        if result.succeeded:
            return [k for k in result.value if k.startswith(prefix)]
        logger.debug("keys_with_prefix(%s): primary failed (%s), scanning fallback",
                     prefix, result.reason.code)

        keys: list[str] = []
        count = self._fallback("length")
        if not count.succeeded:
            logger.warning("keys_with_prefix(%s): fallback failed: %s", prefix, count.reason)
            return keys
        for i in range(count.value):
            item = self._fallback("key", i)
            if not item.succeeded:
                logger.warning("keys_with_prefix(%s): fallback scan stopped: %s",
                               prefix, item.reason)
                break
            if item.value and item.value.startswith(prefix):
                keys.append(item.value)
        return keys

    async def migrate_key(self, key: str) -> bool:
        """
        Move key from the fallback tier into the primary tier.
        The fallback copy is removed only after the primary write succeeded;
        an existing primary value is overwritten. Returns True if moved.
        """
        legacy = self._fallback("get_item", key)
        if legacy.status is not TierStatus.OK:
            return False

        result = await self._primary("put", key, legacy.value)
        if not result.succeeded:
            logger.info("Migration of '%s' deferred, fallback copy kept: %s", key, result.reason)
            return False

        removed = self._fallback("remove_item", key)
        if not removed.succeeded:
            logger.warning("Migrated '%s' but could not clear fallback copy: %s",
                           key, removed.reason)
        logger.info("Migrated '%s' to primary storage (%d chars)", key, len(legacy.value))
        return True

    async def migrate_keys(self, keys: Iterable[str]) -> list[str]:
        """Run migrate_key for each key in order. Returns the keys moved."""
        moved = []
        for key in keys:
            if await self.migrate_key(key):
                moved.append(key)
        return moved
