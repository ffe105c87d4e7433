"""
chathtml Persistence Facade
Module-level access to the tiered key-value store built from settings.
Structure on disk (CHATHTML_DATA_DIR):
  data/
    chathtml.sqlite3  — primary tier, table kv(key, value)
    fallback.json     — fallback tier, flat {key: value}, quota-limited
"""

import logging
import threading
from typing import Optional

from config import get_settings
from repositories import TieredStore, build_store

logger = logging.getLogger(__name__)

_store: Optional[TieredStore] = None
_lock = threading.Lock()


def get_store() -> TieredStore:
    """Return the process-wide store, building it from settings on first use."""
    global _store
    with _lock:
        if _store is None:
            config = get_settings().store_config()
            _store = build_store(config)
            logger.info(
                "Store ready: primary=%s fallback=%s",
                config.database_path if config.primary_enabled else "disabled",
                config.fallback_path,
            )
        return _store


def reset_store(instance: Optional[TieredStore] = None) -> None:
    """Drop the cached store (or install instance). Used when settings change and in tests."""
    global _store
    with _lock:
        _store = instance

