"""Typed view-mode change events for legacy listeners.

Consumers outside this package still listen for the browser-era event names
and payload shapes, so the names and `detail` dictionaries are fixed.
Events are dispatched on the module-level `window` target.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar

from orgpilot.constants import INITIATIVE_VIEW_MODE_CHANGE_EVENT, ORG_VIEW_MODE_CHANGE_EVENT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrgViewModeChange:
    name: ClassVar[str] = ORG_VIEW_MODE_CHANGE_EVENT
    is_list_view: bool

    @property
    def detail(self) -> dict[str, bool]:
        return {"isListView": self.is_list_view}


@dataclass(frozen=True)
class InitiativeViewModeChange:
    name: ClassVar[str] = INITIATIVE_VIEW_MODE_CHANGE_EVENT
    view_mode: str

    @property
    def detail(self) -> dict[str, str]:
        return {"viewMode": self.view_mode}


ViewModeEvent = OrgViewModeChange | InitiativeViewModeChange
EventHandler = Callable[[ViewModeEvent], None]


def event_for(event_name: str, value: str) -> ViewModeEvent:
    """Build the typed event for a feature's broadcast name and new value."""
    if event_name == ORG_VIEW_MODE_CHANGE_EVENT:
        return OrgViewModeChange(is_list_view=value == "list")
    if event_name == INITIATIVE_VIEW_MODE_CHANGE_EVENT:
        return InitiativeViewModeChange(view_mode=value)
    raise ValueError(f"Unknown view-mode event: {event_name}")


class EventTarget:
    """Named-event dispatcher with add/remove listener semantics."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventHandler]] = {}

    def add_event_listener(self, name: str, handler: EventHandler) -> None:
        handlers = self._listeners.setdefault(name, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_event_listener(self, name: str, handler: EventHandler) -> None:
        handlers = self._listeners.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def dispatch_event(self, event: ViewModeEvent) -> None:
        """Call every listener for the event's name; listener failures are logged."""
        handlers = list(self._listeners.get(event.name, ()))
        logger.debug("Dispatch %s %s to %d listener(s)", event.name, event.detail, len(handlers))
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Listener for %s failed: %s", event.name, e, exc_info=True)


window = EventTarget()
