"""
File-based implementation of FallbackTier.
A single JSON object {key: value} under the data directory, sized like
browser localStorage: every key and value counts two bytes per UTF-16
code unit against a fixed quota.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from .base import DEFAULT_FALLBACK_QUOTA_BYTES, QuotaExceeded, TransactionFailure

logger = logging.getLogger(__name__)


def utf16_bytes(text: str) -> int:
    return len(text.encode("utf-16-le"))


def _size(data: dict) -> int:
    return sum(utf16_bytes(k) + utf16_bytes(v) for k, v in data.items())


class FileStore:
    """Fallback persistence: flat key -> string mapping in one JSON file."""

    def __init__(self, path: Path, quota_bytes: int = DEFAULT_FALLBACK_QUOTA_BYTES):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes
        self._lock = threading.Lock()

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring non-object fallback file %s", self.path)
            return {}
        entries = {}
        for k, v in data.items():
            if not isinstance(v, str):
                logger.warning("Skipping non-string fallback value for '%s' in %s", k, self.path)
                continue
            entries[k] = v
        return entries

    def _write(self, data: dict) -> None:
        tmp = self.path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            tmp.replace(self.path)
        except OSError as e:
            raise TransactionFailure(f"Failed to write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store value under key. Raises QuotaExceeded and leaves the file as-is when full."""
        with self._lock:
            data = self._read()
            data[key] = value
            used = _size(data)
            if used > self.quota_bytes:
                raise QuotaExceeded(
                    f"Setting '{key}' needs {used} bytes (quota {self.quota_bytes})"
                )
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is None:
                return
            self._write(data)

    def length(self) -> int:
        return len(self._read())

    def key(self, index: int) -> Optional[str]:
        keys = list(self._read())
        if 0 <= index < len(keys):
            return keys[index]
        return None

