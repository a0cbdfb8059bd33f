"""Persistence port shared by the cookie and legacy local-storage adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class StorageUnavailableError(Exception):
    """A storage channel could not be read or written (disabled, missing, corrupt)."""

    def __init__(self, channel: str, reason: str):
        super().__init__(f"{channel} storage unavailable: {reason}")
        self.channel = channel
        self.reason = reason


@runtime_checkable
class KeyValueStore(Protocol):
    """String key/value store. Implementations raise StorageUnavailableError on failure."""

    name: str

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value under key."""
        ...
