"""
Editor document state: load on open, save on change, migrate legacy entries.
"""

import asyncio
import logging
from typing import Iterable, Optional

from repositories import TieredStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "chathtml-code"
DOCUMENT_PREFIX = "chathtml-"

INITIAL_CODE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>My Page</title>
    <style>
        body {
            font-family: system-ui, -apple-system, sans-serif;
            max-width: 800px;
            margin: 0 auto;
            padding: 2rem;
            line-height: 1.5;
        }
        h1 { color: #2563eb; }
    </style>
</head>
<body>
    <h1>Hello World</h1>
    <p>Welcome to your new page. Ask the AI to make changes!</p>
</body>
</html>"""


class EditorDocuments:
    """Named HTML documents persisted through the tiered store."""

    def __init__(self, store: TieredStore):
        self.store = store

    async def load(self, key: str = STORAGE_KEY) -> str:
        """Saved code for key, or the starter page when nothing is saved."""
        code = await self.store.get(key)
        return code if code else INITIAL_CODE

    async def save(self, key: str, code: str) -> bool:
        return await self.store.set(key, code)

    async def delete(self, key: str) -> None:
        await self.store.remove(key)

    async def list_keys(self, prefix: str = DOCUMENT_PREFIX) -> list[str]:
        return sorted(await self.store.keys_with_prefix(prefix))

    async def migrate_legacy(self, keys: Iterable[str]) -> list[str]:
        """Move entries left in the fallback tier by older versions. Run once per start."""
        moved = await self.store.migrate_keys(keys)
        if moved:
            logger.info("Migrated legacy documents: %s", ", ".join(moved))
        return moved


class Autosaver:
    """
    Debounced saves for documents that change on every keystroke.

    schedule() replaces any pending save for the same key, so only the
    latest content is written once edits pause for `delay` seconds.
    """

    def __init__(self, documents: EditorDocuments, delay: float = 0.5):
        self.documents = documents
        self.delay = delay
        self._pending: dict[str, str] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._writing: dict[str, asyncio.Task] = {}

    def schedule(self, key: str, code: str) -> None:
        self._pending[key] = code
        task = self._tasks.pop(key, None)
        if task is not None and not task.done():
            task.cancel()
        self._tasks[key] = asyncio.create_task(self._save_later(key))

    def pending(self, key: str) -> Optional[str]:
        return self._pending.get(key)

    async def _save_later(self, key: str) -> None:
        await asyncio.sleep(self.delay)
        # Once writing, a newer schedule() must not cancel this task.
        task = asyncio.current_task()
        if self._tasks.get(key) is task:
            del self._tasks[key]
        previous = self._writing.get(key)
        self._writing[key] = task
        try:
            # Writes for one key land in schedule order.
            if previous is not None:
                await asyncio.gather(previous, return_exceptions=True)
            await self._save(key)
        finally:
            if self._writing.get(key) is task:
                del self._writing[key]

    async def _save(self, key: str) -> None:
        code = self._pending.pop(key, None)
        if code is None:
            return
        if not await self.documents.save(key, code):
            logger.warning("Autosave of '%s' was not persisted", key)

    async def flush(self) -> None:
        """Write every pending document now and wait for saves already under way."""
        for key in list(self._pending):
            task = self._tasks.pop(key, None)
            if task is not None and not task.done():
                task.cancel()
        if self._writing:
            await asyncio.gather(*self._writing.values(), return_exceptions=True)
        for key in list(self._pending):
            await self._save(key)
