"""One organisation page: cache, navigator, expansion and view preference together."""

from __future__ import annotations

import logging

from orgpilot.hierarchy.cache import FetchChildren, NodeFetchCache
from orgpilot.hierarchy.expansion import ExpansionState
from orgpilot.hierarchy.navigator import HierarchyNavigator
from orgpilot.hierarchy.tree import OrgRow, build_rows
from orgpilot.models import OrgNode, OrgPageData, OrgStructure
from orgpilot.viewmode.features import ORG_VIEW
from orgpilot.viewmode.store import ViewModeStore

logger = logging.getLogger(__name__)


class OrgChartSession:
    """Navigation state for one loaded organisation page.

    The focused node's reports always come from the cache, so drilling back
    into a node that was already visited is free.
    """

    def __init__(
        self,
        structure: OrgStructure,
        root: OrgNode,
        direct_reports: list[OrgNode],
        *,
        fetch_children: FetchChildren,
        store: ViewModeStore,
        fetch_timeout_s: float | None = None,
    ) -> None:
        self.structure = structure
        self.cache = NodeFetchCache(fetch_children, fetch_timeout_s=fetch_timeout_s)
        self.cache.seed(root.id, direct_reports)
        self.navigator = HierarchyNavigator(root)
        self.expansion = ExpansionState(root.id)
        self.store = store
        self._known: dict[int, OrgNode] = {root.id: root}
        self._remember(direct_reports)
        self.current_reports: list[OrgNode] = list(direct_reports)
        self.cache.subscribe(self._on_children_loaded)

    @classmethod
    def from_page_data(
        cls,
        data: OrgPageData,
        *,
        fetch_children: FetchChildren,
        store: ViewModeStore,
        fetch_timeout_s: float | None = None,
    ) -> "OrgChartSession":
        return cls(
            data.structure,
            data.root,
            data.direct_reports,
            fetch_children=fetch_children,
            store=store,
            fetch_timeout_s=fetch_timeout_s,
        )

    def _remember(self, nodes: list[OrgNode]) -> None:
        for node in nodes:
            self._known[node.id] = node

    def _on_children_loaded(self, node_id: int, children: list[OrgNode]) -> None:
        self._remember(children)

    @property
    def root(self) -> OrgNode:
        return self.navigator.root

    @property
    def focused_node(self) -> OrgNode:
        return self.navigator.focused_node

    def find_node(self, node_id: int) -> OrgNode | None:
        """Any node seen so far on this page."""
        return self._known.get(node_id)

    async def _load_focused(self) -> list[OrgNode]:
        self.current_reports = await self.cache.children_of(self.focused_node)
        return self.current_reports

    async def focus_on(self, node: OrgNode) -> list[OrgNode]:
        self.navigator.focus_on(node)
        return await self._load_focused()

    async def navigate_up(self) -> list[OrgNode]:
        self.navigator.navigate_up()
        return await self._load_focused()

    async def navigate_to_root(self) -> list[OrgNode]:
        self.navigator.navigate_to_root()
        return await self._load_focused()

    async def navigate_to(self, node_id: int) -> list[OrgNode]:
        self.navigator.navigate_to(node_id)
        return await self._load_focused()

    async def locate(self, node_id: int) -> OrgNode | None:
        """Find a node by id, walking down from the root through direct-report fetches.

        Breadth-first; each node is expanded at most once, so corrupt
        manager data cannot loop.
        """
        found = self._known.get(node_id)
        if found is not None:
            return found
        queue = [self.root]
        visited: set[int] = set()
        while queue:
            node = queue.pop(0)
            if node.id in visited:
                continue
            visited.add(node.id)
            for child in await self.cache.children_of(node):
                if child.id == node_id:
                    return child
                queue.append(child)
        logger.warning("Node %d not found under root %d", node_id, self.root.id)
        return None

    async def focus_on_id(self, node_id: int) -> OrgNode | None:
        """Deep link: focus a node by id with its full ancestor stack."""
        node = await self.locate(node_id)
        if node is None:
            return None
        self.navigator.focus_path(node, self._known)
        await self._load_focused()
        return node

    async def refresh(self) -> list[OrgNode]:
        """Drop the focused node's cached reports and load them again."""
        self.cache.invalidate(self.focused_node.id)
        self.current_reports = await self.cache.ensure_children(self.focused_node.id)
        return self.current_reports

    async def toggle(self, node: OrgNode) -> bool:
        return await self.expansion.toggle(node, self.cache)

    def rows(self) -> list[OrgRow]:
        """List-view rows rooted at the focused node."""
        return build_rows(self.focused_node, self.cache, self.expansion)

    @property
    def is_list_view(self) -> bool:
        return self.store.read(ORG_VIEW) == "list"

    def set_list_view(self, is_list_view: bool) -> None:
        """Persist the org view mode; broadcasts orgViewModeChange."""
        self.store.write(ORG_VIEW, "list" if is_list_view else "grid")
