"""Organisation hierarchy: node cache, drill-down navigator, expansion state."""

from orgpilot.hierarchy.cache import CacheEntry, NodeFetchCache
from orgpilot.hierarchy.expansion import ExpansionState
from orgpilot.hierarchy.navigator import HierarchyNavigator, NavigationContext, resolve_manager_chain
from orgpilot.hierarchy.session import OrgChartSession
from orgpilot.hierarchy.tree import OrgRow, build_rows

__all__ = [
    "CacheEntry",
    "ExpansionState",
    "HierarchyNavigator",
    "NavigationContext",
    "NodeFetchCache",
    "OrgChartSession",
    "OrgRow",
    "build_rows",
    "resolve_manager_chain",
]
