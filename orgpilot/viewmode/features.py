"""View-mode features and their storage keys."""

from __future__ import annotations

from dataclasses import dataclass

from orgpilot.constants import (
    INITIATIVE_VIEW_MODE_CHANGE_EVENT,
    INITIATIVE_VIEW_MODE_KEY,
    INSTANCE_VIEW_MODE_PREFIX,
    ORG_VIEW_MODE_CHANGE_EVENT,
    ORG_VIEW_MODE_KEY,
    TASK_VIEW_MODE_KEY,
)
from orgpilot.utils import slugify_title


@dataclass(frozen=True)
class ViewModeFeature:
    """A persisted display preference with a closed set of legal values."""

    name: str
    key: str
    legal_values: tuple[str, ...]
    default: str
    event_name: str | None = None

    def __post_init__(self) -> None:
        if self.default not in self.legal_values:
            raise ValueError(f"Default {self.default!r} is not a legal value for {self.name}")

    def is_legal(self, value: str | None) -> bool:
        return value is not None and value in self.legal_values

    def for_instance(self, cookie_key: str) -> "ViewModeFeature":
        """Per-instance variant stored under `viewMode-{cookie_key}`; instances never broadcast."""
        return ViewModeFeature(
            name=f"{self.name}:{cookie_key}",
            key=f"{INSTANCE_VIEW_MODE_PREFIX}{cookie_key}",
            legal_values=self.legal_values,
            default=self.default,
        )


TASK_VIEW = ViewModeFeature(name="task", key=TASK_VIEW_MODE_KEY, legal_values=("list", "split"), default="list")
ORG_VIEW = ViewModeFeature(
    name="org",
    key=ORG_VIEW_MODE_KEY,
    legal_values=("grid", "list"),
    default="grid",
    event_name=ORG_VIEW_MODE_CHANGE_EVENT,
)
INITIATIVE_VIEW = ViewModeFeature(
    name="initiative",
    key=INITIATIVE_VIEW_MODE_KEY,
    legal_values=("list", "columns"),
    default="columns",
    event_name=INITIATIVE_VIEW_MODE_CHANGE_EVENT,
)

FEATURES: dict[str, ViewModeFeature] = {f.name: f for f in (TASK_VIEW, ORG_VIEW, INITIATIVE_VIEW)}
FEATURES_BY_KEY: dict[str, ViewModeFeature] = {f.key: f for f in FEATURES.values()}


def get_feature(name: str) -> ViewModeFeature:
    """Look up a feature by its short name (task, org, initiative)."""
    try:
        return FEATURES[name]
    except KeyError:
        raise ValueError(f"Unknown view-mode feature: {name}. Expected one of: {', '.join(FEATURES)}") from None


def title_cookie_key(prefix: str, title: str) -> str:
    """`task-view-my-tasks` style key from a human-readable title."""
    return f"{prefix}-{slugify_title(title)}"


def org_cookie_key(structure_id: int) -> str:
    return f"org-view-{structure_id}"


def initiative_cookie_key(slug: str) -> str:
    return f"initiative-view-{slug}"
