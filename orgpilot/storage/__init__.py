"""Dual-channel key/value persistence (cookie + legacy local storage)."""

from __future__ import annotations

from pathlib import Path

from orgpilot.config.schema import StorageConfig
from orgpilot.storage.base import KeyValueStore, StorageUnavailableError
from orgpilot.storage.bridge import StorageBridge
from orgpilot.storage.cookies import CookieStore
from orgpilot.storage.local import LocalStorageStore
from orgpilot.storage.memory import MemoryStore

__all__ = [
    "CookieStore",
    "KeyValueStore",
    "LocalStorageStore",
    "MemoryStore",
    "StorageBridge",
    "StorageUnavailableError",
    "build_bridge",
]


def build_bridge(config: StorageConfig) -> StorageBridge:
    """Build the storage bridge described by the storage config."""
    primary: KeyValueStore
    legacy: KeyValueStore | None
    if config.persist:
        primary = CookieStore(Path(config.cookie_path), domain=config.cookie_domain)
        legacy = LocalStorageStore(Path(config.legacy_path)) if config.legacy_enabled else None
    else:
        primary = MemoryStore("cookie")
        legacy = MemoryStore("local_storage") if config.legacy_enabled else None
    return StorageBridge(primary, legacy)
