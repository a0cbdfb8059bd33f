"""Cookie/local-storage bridge.

The cookie channel is authoritative on read. Every write goes to the cookie
first and then, independently, to the legacy store so clients that only
understand the legacy store keep working during the migration window.
Nothing here raises: unavailable channels read as absent and swallow writes.
"""

from __future__ import annotations

import logging

from orgpilot.storage.base import KeyValueStore, StorageUnavailableError

logger = logging.getLogger(__name__)


class StorageBridge:
    """Write-through bridge over a primary (cookie) and optional legacy store."""

    def __init__(self, primary: KeyValueStore, legacy: KeyValueStore | None = None) -> None:
        self.primary = primary
        self.legacy = legacy

    @staticmethod
    def _safe_get(store: KeyValueStore, key: str) -> str | None:
        try:
            return store.get(key)
        except StorageUnavailableError as e:
            logger.debug("Read of %s from %s failed: %s", key, store.name, e.reason)
            return None

    @staticmethod
    def _safe_set(store: KeyValueStore, key: str, value: str) -> bool:
        try:
            store.set(key, value)
            return True
        except StorageUnavailableError as e:
            logger.debug("Write of %s to %s failed: %s", key, store.name, e.reason)
            return False

    def get(self, key: str) -> str | None:
        """Return the cookie value. Never consults the legacy store."""
        return self._safe_get(self.primary, key)

    def get_legacy(self, key: str) -> str | None:
        """Explicit fallback read from the legacy store."""
        if self.legacy is None:
            return None
        return self._safe_get(self.legacy, key)

    def set(self, key: str, value: str) -> None:
        primary_ok = self._safe_set(self.primary, key, value)
        legacy_ok = self._safe_set(self.legacy, key, value) if self.legacy is not None else None
        logger.debug("Stored %s=%s (cookie=%s, legacy=%s)", key, value, primary_ok, legacy_ok)
