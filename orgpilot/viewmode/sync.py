"""Cross-tab view-mode synchronisation by polling.

Each tab keeps its own in-memory copy of the watched preferences. Writes made
in the same tab update that copy immediately; writes made elsewhere are seen
after the next poll, so the staleness bound is one poll interval. Changes
picked up by polling never re-broadcast the legacy events.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from orgpilot.constants import VIEW_MODE_POLL_INTERVAL_S
from orgpilot.viewmode.features import ViewModeFeature
from orgpilot.viewmode.store import ViewModeStore

logger = logging.getLogger(__name__)

ValueCallback = Callable[[str], None]


class ViewModeSync:
    """Polling subscription over a ViewModeStore."""

    def __init__(self, store: ViewModeStore, *, interval_s: float = VIEW_MODE_POLL_INTERVAL_S) -> None:
        if interval_s <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval_s}")
        self.store = store
        self.interval_s = interval_s
        self._features: dict[str, ViewModeFeature] = {}
        self._values: dict[str, str] = {}
        self._callbacks: dict[str, list[ValueCallback]] = {}
        self._task: asyncio.Task[None] | None = None
        self._shutdown: asyncio.Event | None = None
        store.subscribe(self._on_local_write)

    def watch(self, feature: ViewModeFeature, on_change: ValueCallback | None = None) -> str:
        """Start tracking a feature; returns its current persisted value."""
        if feature.key not in self._features:
            self._features[feature.key] = feature
            self._values[feature.key] = self.store.read(feature)
        if on_change is not None:
            self._callbacks.setdefault(feature.key, []).append(on_change)
        return self._values[feature.key]

    def unwatch(self, feature: ViewModeFeature) -> None:
        self._features.pop(feature.key, None)
        self._values.pop(feature.key, None)
        self._callbacks.pop(feature.key, None)

    def value(self, feature: ViewModeFeature | str) -> str:
        """This tab's in-memory value for a watched feature."""
        key = feature if isinstance(feature, str) else feature.key
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"View mode {key} is not being watched") from None

    def _on_local_write(self, feature_key: str, value: str) -> None:
        feature = self._features.get(feature_key)
        if feature is None or not feature.is_legal(value):
            return
        if self._values.get(feature_key) != value:
            self._values[feature_key] = value
            self._fire(feature_key, value)

    def _fire(self, feature_key: str, value: str) -> None:
        for callback in list(self._callbacks.get(feature_key, ())):
            try:
                callback(value)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("View-mode sync callback failed for %s: %s", feature_key, e, exc_info=True)

    def poll_once(self) -> list[str]:
        """Re-read every watched feature; returns the keys whose value changed."""
        changed: list[str] = []
        for key, feature in list(self._features.items()):
            persisted = self.store.read(feature)
            if persisted != self._values.get(key):
                logger.debug("View mode %s changed externally: %s -> %s", key, self._values.get(key), persisted)
                self._values[key] = persisted
                changed.append(key)
                self._fire(key, persisted)
        return changed

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Poll until shutdown_event is set."""
        while not shutdown_event.is_set():
            try:
                self.poll_once()
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("View-mode poll failed: %s", e, exc_info=True)
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.interval_s)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self._task is not None and not self._task.done():
            logger.debug("View-mode sync already running")
            return
        self._shutdown = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._shutdown), name="viewmode-sync")
        logger.debug("View-mode sync started (interval=%.3fs)", self.interval_s)

    async def stop(self) -> None:
        if self._shutdown is not None:
            self._shutdown.set()
        if self._task is not None:
            await self._task
        self._task = None
        self._shutdown = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def close(self) -> None:
        """Detach from the store; call stop() first if polling was started."""
        self.store.unsubscribe(self._on_local_write)
