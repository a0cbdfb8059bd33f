"""View-mode preference store.

Reads prefer the cookie channel, fall back explicitly to the legacy store,
and finally to the feature default; any value outside the feature's legal
values counts as absent. Writes go through the bridge to both channels, then
to local listeners, then (for broadcasting features whose value changed) to
the legacy event target.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection

from orgpilot.storage.bridge import StorageBridge
from orgpilot.viewmode.events import EventTarget, event_for
from orgpilot.viewmode.events import window as default_target
from orgpilot.viewmode.features import FEATURES_BY_KEY, ViewModeFeature

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, str], None]


class ViewModeStore:
    """Per-feature display preferences persisted through a StorageBridge."""

    def __init__(self, bridge: StorageBridge, *, event_target: EventTarget | None = None) -> None:
        self.bridge = bridge
        self.event_target = event_target if event_target is not None else default_target
        self._listeners: list[ChangeListener] = []

    def get(self, feature_key: str, legal_values: Collection[str], default: str) -> str:
        value = self.bridge.get(feature_key)
        if value is not None and value in legal_values:
            return value
        if value is not None:
            logger.debug("Ignoring unrecognised cookie value %r for %s", value, feature_key)

        legacy_value = self.bridge.get_legacy(feature_key)
        if legacy_value is not None and legacy_value in legal_values:
            return legacy_value
        if legacy_value is not None:
            logger.debug("Ignoring unrecognised legacy value %r for %s", legacy_value, feature_key)

        return default

    def set(self, feature_key: str, value: str) -> None:
        feature = FEATURES_BY_KEY.get(feature_key)
        if feature is not None:
            previous: str | None = self.read(feature)
        else:
            previous = self.bridge.get(feature_key)

        self.bridge.set(feature_key, value)
        self._notify(feature_key, value)

        if previous == value:
            logger.debug("%s unchanged at %r; not broadcasting", feature_key, value)
            return
        if feature is not None and feature.event_name:
            self.event_target.dispatch_event(event_for(feature.event_name, value))

    def read(self, feature: ViewModeFeature) -> str:
        return self.get(feature.key, feature.legal_values, feature.default)

    def write(self, feature: ViewModeFeature, value: str) -> None:
        if not feature.is_legal(value):
            raise ValueError(
                f"Invalid view mode {value!r} for {feature.name}. Expected one of: {', '.join(feature.legal_values)}"
            )
        self.set(feature.key, value)

    def subscribe(self, callback: ChangeListener) -> None:
        """Register a callback(feature_key, value) fired after every write through this store."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: ChangeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, feature_key: str, value: str) -> None:
        for callback in list(self._listeners):
            try:
                callback(feature_key, value)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("View-mode listener failed for %s: %s", feature_key, e, exc_info=True)
