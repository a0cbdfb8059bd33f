"""Terminal organisation browser.

Grid mode shows the focused node with its direct reports as a flat list;
list mode lets every row expand lazily. The org view mode is polled so a
toggle made by another process shows up here within one poll interval.
"""

from __future__ import annotations

import logging
from typing import Protocol

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static, Tree
from textual.widgets.tree import TreeNode

from orgpilot.api_client import APIError
from orgpilot.constants import VIEW_MODE_POLL_INTERVAL_S
from orgpilot.hierarchy.session import OrgChartSession
from orgpilot.models import OrgNode, OrgPageData
from orgpilot.viewmode.features import ORG_VIEW
from orgpilot.viewmode.store import ViewModeStore
from orgpilot.viewmode.sync import ViewModeSync

logger = logging.getLogger(__name__)


class OrgDataSource(Protocol):
    """The slice of OrgAPIClient the browser needs."""

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def get_organisation_page(self) -> OrgPageData: ...

    async def get_direct_reports(self, node_id: int) -> list[OrgNode]: ...


def node_label(node: OrgNode) -> Text:
    """Row label: name, title, report count and status badges."""
    label = Text(node.full_name, style="bold")
    if node.title:
        label.append(f"  {node.title}", style="dim")
    if node.direct_reports_count > 0:
        label.append(f"  ({node.direct_reports_count})", style="cyan")
    if node.status_label:
        label.append(f"  {node.status_label}", style="yellow")
    if node.is_placeholder:
        label.append("  Placeholder", style="magenta")
    return label


class OrgBrowserApp(App[None]):
    """Browse one organisation structure with drill-down focus."""

    TITLE = "OrgPilot"
    CSS = """
    #context {
        height: auto;
        padding: 0 1;
    }
    #org-tree {
        height: 1fr;
    }
    """
    BINDINGS = [
        Binding("f", "focus_selected", "Focus"),
        Binding("u", "navigate_up", "Up one level"),
        Binding("r", "navigate_root", "Full organisation"),
        Binding("v", "toggle_view", "Grid/List"),
        Binding("R", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        client: OrgDataSource,
        store: ViewModeStore,
        *,
        node_id: int | None = None,
        poll_interval_s: float = VIEW_MODE_POLL_INTERVAL_S,
        fetch_timeout_s: float | None = None,
    ) -> None:
        super().__init__()
        self.client = client
        self.store = store
        self.node_id = node_id
        self.fetch_timeout_s = fetch_timeout_s
        self.sync = ViewModeSync(store, interval_s=poll_interval_s)
        self.session: OrgChartSession | None = None
        self.load_error: str | None = None
        self.view_mode = ORG_VIEW.default

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="context")
        yield Tree(Text("Loading..."), id="org-tree")
        yield Footer()

    async def on_mount(self) -> None:
        self.view_mode = self.sync.watch(ORG_VIEW, self._on_view_mode_changed)
        self.set_interval(self.sync.interval_s, self.sync.poll_once)

        await self.client.connect()
        try:
            data = await self.client.get_organisation_page()
        except APIError as e:
            logger.error("Failed to load organisation page: %s", e)
            self.load_error = e.detail
            self.query_one("#context", Static).update(Text(f"Could not load organisation: {e.detail}"))
            self.notify(e.detail, severity="error")
            return

        self.session = OrgChartSession.from_page_data(
            data,
            fetch_children=self.client.get_direct_reports,
            store=self.store,
            fetch_timeout_s=self.fetch_timeout_s,
        )
        if self.node_id is not None and await self.session.focus_on_id(self.node_id) is None:
            self.notify(f"Node {self.node_id} not found in {data.structure.name}", severity="warning")
        self.sub_title = data.structure.name
        self._render_tree()

    async def on_unmount(self) -> None:
        self.sync.close()
        await self.client.close()

    def _on_view_mode_changed(self, value: str) -> None:
        self.view_mode = value
        if self.session is not None:
            self._render_tree()

    def _render_tree(self) -> None:
        session = self.session
        if session is None:
            return
        tree: Tree[OrgNode] = self.query_one("#org-tree", Tree)
        focused = session.focused_node
        tree.clear()
        tree.root.set_label(node_label(focused))
        tree.root.data = focused
        expandable = self.view_mode == "list"
        for child in session.current_reports:
            self._add_child(tree.root, child, expandable)
        tree.root.expand()
        self._update_context()

    def _add_child(self, parent: TreeNode[OrgNode], node: OrgNode, expandable: bool) -> None:
        parent.add(node_label(node), data=node, allow_expand=expandable and not node.is_leaf)

    def _update_context(self) -> None:
        session = self.session
        if session is None:
            return
        context = Text(session.navigator.get_breadcrumb())
        context.append(f"   {self.view_mode} view", style="dim")
        if not session.current_reports:
            context.append("   no direct reports", style="dim")
        self.query_one("#context", Static).update(context)

    async def on_tree_node_expanded(self, event: Tree.NodeExpanded[OrgNode]) -> None:
        session = self.session
        tree_node = event.node
        org_node = tree_node.data
        if session is None or org_node is None or tree_node.is_root:
            return
        if not session.expansion.is_expanded(org_node.id):
            await session.toggle(org_node)
        if tree_node.children:
            return
        children = session.cache.peek(org_node.id) or []
        for child in children:
            self._add_child(tree_node, child, expandable=True)
        if not children and not session.cache.is_loading(org_node.id):
            tree_node.allow_expand = False

    async def on_tree_node_collapsed(self, event: Tree.NodeCollapsed[OrgNode]) -> None:
        session = self.session
        org_node = event.node.data
        if session is None or org_node is None or event.node.is_root:
            return
        if session.expansion.is_expanded(org_node.id):
            await session.toggle(org_node)

    async def action_focus_selected(self) -> None:
        if self.session is None:
            return
        cursor = self.query_one("#org-tree", Tree).cursor_node
        if cursor is None or cursor.data is None or cursor.is_root:
            return
        await self.session.focus_on(cursor.data)
        self._render_tree()

    async def action_navigate_up(self) -> None:
        if self.session is None:
            return
        if not self.session.navigator.can_navigate_up:
            self.notify("Already viewing the full organisation")
            return
        await self.session.navigate_up()
        self._render_tree()

    async def action_navigate_root(self) -> None:
        if self.session is None:
            return
        await self.session.navigate_to_root()
        self._render_tree()

    async def action_refresh(self) -> None:
        if self.session is None:
            return
        await self.session.refresh()
        self._render_tree()

    def action_toggle_view(self) -> None:
        if self.session is None:
            return
        self.session.set_list_view(self.view_mode != "list")
