"""
chathtml backend configuration.
Single source of truth for environment and app settings.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

from repositories.base import DEFAULT_FALLBACK_QUOTA_BYTES, StoreConfig

load_dotenv()


def get_settings():
    """Return app settings (use as FastAPI Depends or call directly)."""
    return Settings()


def _float_or_none(raw: Optional[str]) -> Optional[float]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


class Settings:
    """Application settings loaded from environment."""

    # App
    APP_TITLE: str = "chathtml API"
    APP_VERSION: str = "1.0.0"
    ALLOWED_ORIGINS: list[str]

    # Storage: primary tier "sqlite" | "none" (fallback file only)
    CHATHTML_PRIMARY: Literal["sqlite", "none"] = "sqlite"
    CHATHTML_DATA_DIR: Path
    CHATHTML_STORE_NAME: str = "chathtml"
    CHATHTML_TABLE_NAME: str = "kv"
    CHATHTML_FALLBACK_FILE: str = "fallback.json"
    CHATHTML_FALLBACK_QUOTA_BYTES: int = DEFAULT_FALLBACK_QUOTA_BYTES
    CHATHTML_PRIMARY_TIMEOUT: Optional[float] = None

    # Editor
    CHATHTML_LEGACY_KEYS: list[str]
    CHATHTML_AUTOSAVE_DELAY: float = 0.5

    def __init__(self):
        origins = os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000")
        self.ALLOWED_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]
        primary = (os.environ.get("CHATHTML_PRIMARY") or "sqlite").lower()
        self.CHATHTML_PRIMARY = "none" if primary == "none" else "sqlite"
        self.CHATHTML_DATA_DIR = Path(os.environ.get("CHATHTML_DATA_DIR", "data"))
        self.CHATHTML_STORE_NAME = (os.environ.get("CHATHTML_STORE_NAME") or "chathtml").strip()
        self.CHATHTML_TABLE_NAME = (os.environ.get("CHATHTML_TABLE_NAME") or "kv").strip()
        self.CHATHTML_FALLBACK_FILE = (
            os.environ.get("CHATHTML_FALLBACK_FILE") or "fallback.json"
        ).strip()
        try:
            self.CHATHTML_FALLBACK_QUOTA_BYTES = int(
                os.environ.get("CHATHTML_FALLBACK_QUOTA_BYTES") or DEFAULT_FALLBACK_QUOTA_BYTES
            )
        except ValueError:
            self.CHATHTML_FALLBACK_QUOTA_BYTES = DEFAULT_FALLBACK_QUOTA_BYTES
        self.CHATHTML_PRIMARY_TIMEOUT = _float_or_none(os.environ.get("CHATHTML_PRIMARY_TIMEOUT"))
        legacy = os.environ.get("CHATHTML_LEGACY_KEYS", "chathtml-code")
        self.CHATHTML_LEGACY_KEYS = [k.strip() for k in legacy.split(",") if k.strip()]
        self.CHATHTML_AUTOSAVE_DELAY = _float_or_none(
            os.environ.get("CHATHTML_AUTOSAVE_DELAY")
        ) or 0.5

    def store_config(self) -> StoreConfig:
        """Build the persistence config for the tiered store."""
        return StoreConfig(
            data_dir=self.CHATHTML_DATA_DIR,
            store_name=self.CHATHTML_STORE_NAME,
            table_name=self.CHATHTML_TABLE_NAME,
            fallback_file=self.CHATHTML_FALLBACK_FILE,
            fallback_quota_bytes=self.CHATHTML_FALLBACK_QUOTA_BYTES,
            primary_enabled=self.CHATHTML_PRIMARY == "sqlite",
            primary_timeout=self.CHATHTML_PRIMARY_TIMEOUT,
        )
