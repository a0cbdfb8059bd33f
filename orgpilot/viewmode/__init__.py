"""Per-feature view-mode preferences with cross-tab polling."""

from orgpilot.viewmode.events import (
    EventTarget,
    InitiativeViewModeChange,
    OrgViewModeChange,
    ViewModeEvent,
    window,
)
from orgpilot.viewmode.features import (
    FEATURES,
    INITIATIVE_VIEW,
    ORG_VIEW,
    TASK_VIEW,
    ViewModeFeature,
    get_feature,
    initiative_cookie_key,
    org_cookie_key,
    title_cookie_key,
)
from orgpilot.viewmode.store import ViewModeStore
from orgpilot.viewmode.sync import ViewModeSync

__all__ = [
    "EventTarget",
    "FEATURES",
    "INITIATIVE_VIEW",
    "InitiativeViewModeChange",
    "ORG_VIEW",
    "OrgViewModeChange",
    "TASK_VIEW",
    "ViewModeEvent",
    "ViewModeFeature",
    "ViewModeStore",
    "ViewModeSync",
    "get_feature",
    "initiative_cookie_key",
    "org_cookie_key",
    "title_cookie_key",
    "window",
]
