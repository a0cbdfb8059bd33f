"""In-process store used for tests and when persistence is disabled."""

from __future__ import annotations

from orgpilot.storage.base import StorageUnavailableError


class MemoryStore:
    """Dictionary-backed store.

    Several `StorageBridge` instances may share one MemoryStore to simulate
    tabs that see the same browser storage.
    """

    def __init__(self, name: str = "memory", *, available: bool = True) -> None:
        self.name = name
        self.available = available
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        if not self.available:
            raise StorageUnavailableError(self.name, "disabled")
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not self.available:
            raise StorageUnavailableError(self.name, "disabled")
        self._data[key] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)
