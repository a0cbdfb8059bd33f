"""Integration tests for the textual organisation browser."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from textual.widgets import Tree

from orgpilot.api_client import APIError
from orgpilot.cli.tui.app import OrgBrowserApp, node_label
from orgpilot.models import OrgNode, OrgPageData, OrgStructure
from orgpilot.storage import MemoryStore, StorageBridge
from orgpilot.viewmode import ORG_VIEW, EventTarget, ViewModeStore

ROOT = OrgNode(id=1, full_name="Ada Root", title="CEO", direct_reports_count=2)
CTO = OrgNode(id=5, full_name="Grace CTO", title="CTO", manager_id=1, direct_reports_count=1)
CFO = OrgNode(id=6, full_name="Cleo CFO", title="CFO", manager_id=1, status="former")
LEAD = OrgNode(id=9, full_name="Linus Lead", manager_id=5)

PAGE = OrgPageData(
    structure=OrgStructure(id=3, name="Primary Organization"),
    root=ROOT,
    direct_reports=[CTO, CFO],
)


def _api_stub(page: OrgPageData = PAGE) -> SimpleNamespace:
    return SimpleNamespace(
        connect=AsyncMock(),
        close=AsyncMock(),
        get_organisation_page=AsyncMock(return_value=page),
        get_direct_reports=AsyncMock(side_effect=lambda node_id: {5: [LEAD]}.get(node_id, [])),
    )


def _store(cookie: MemoryStore | None = None) -> ViewModeStore:
    return ViewModeStore(
        StorageBridge(cookie or MemoryStore("cookie"), MemoryStore("local_storage")),
        event_target=EventTarget(),
    )


def _labels(node) -> list[str]:
    return [child.label.plain.split("  ")[0] for child in node.children]


@pytest.mark.integration
def test_node_label_badges():
    label = node_label(CFO).plain
    assert "Cleo CFO" in label
    assert "Former" in label
    assert "(1)" in node_label(CTO).plain


@pytest.mark.integration
@pytest.mark.asyncio
async def test_browser_renders_root_reports():
    api = _api_stub()
    app = OrgBrowserApp(api, _store())  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        tree = app.query_one("#org-tree", Tree)

        assert tree.root.data == ROOT
        assert _labels(tree.root) == ["Grace CTO", "Cleo CFO"]
        assert app.sub_title == "Primary Organization"
        api.get_organisation_page.assert_awaited_once_with()

    api.close.assert_awaited()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_start_node_opens_focused_with_ancestors():
    api = _api_stub()
    app = OrgBrowserApp(api, _store(), node_id=9)  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        tree = app.query_one("#org-tree", Tree)

        assert tree.root.data == LEAD
        assert app.session.navigator.get_breadcrumb() == "Ada Root > Grace CTO > Linus Lead"

    api.get_organisation_page.assert_awaited_once_with()
    api.get_direct_reports.assert_awaited_once_with(5)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unknown_start_node_stays_at_root():
    app = OrgBrowserApp(_api_stub(), _store(), node_id=404)  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.query_one("#org-tree", Tree).root.data == ROOT
        assert app.session.navigator.is_at_root


@pytest.mark.integration
@pytest.mark.asyncio
async def test_focus_and_navigate_up():
    api = _api_stub()
    app = OrgBrowserApp(api, _store())  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        tree = app.query_one("#org-tree", Tree)
        # Line 0 is the focused node itself
        tree.cursor_line = 1
        assert tree.cursor_node.data == CTO
        await pilot.press("f")
        await pilot.pause()

        assert tree.root.data == CTO
        assert _labels(tree.root) == ["Linus Lead"]
        assert app.session.navigator.get_breadcrumb() == "Ada Root > Grace CTO"

        await pilot.press("u")
        await pilot.pause()
        assert tree.root.data == ROOT
        assert app.session.navigator.is_at_root

    api.get_direct_reports.assert_awaited_once_with(5)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_toggle_view_persists_and_enables_expansion():
    store = _store()
    received = []
    store.event_target.add_event_listener("orgViewModeChange", lambda event: received.append(event.detail))
    app = OrgBrowserApp(_api_stub(), store)  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        tree = app.query_one("#org-tree", Tree)
        assert not tree.root.children[0].allow_expand

        await pilot.press("v")
        await pilot.pause()

        assert store.read(ORG_VIEW) == "list"
        assert app.view_mode == "list"
        assert tree.root.children[0].allow_expand
        # Leaves stay non-expandable in list mode
        assert not tree.root.children[1].allow_expand

    assert received == [{"isListView": True}]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_external_view_mode_change_is_polled():
    cookie = MemoryStore("cookie")
    other_tab = _store(cookie)
    app = OrgBrowserApp(_api_stub(), _store(cookie), poll_interval_s=0.02)  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.view_mode == "grid"

        other_tab.write(ORG_VIEW, "list")
        await pilot.pause(0.2)

        assert app.view_mode == "list"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_list_mode_expands_lazily():
    cookie = MemoryStore("cookie")
    cookie.set("orgViewMode", "list")
    api = _api_stub()
    app = OrgBrowserApp(api, _store(cookie))  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        tree = app.query_one("#org-tree", Tree)
        cto_row = tree.root.children[0]
        cto_row.expand()
        await pilot.pause(0.1)

        assert _labels(cto_row) == ["Linus Lead"]
        assert app.session.expansion.is_expanded(CTO.id)

    api.get_direct_reports.assert_awaited_once_with(5)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_failed_page_load_shows_message():
    api = _api_stub()
    api.get_organisation_page = AsyncMock(side_effect=APIError("Cannot connect to http://org.test"))
    app = OrgBrowserApp(api, _store())  # type: ignore[arg-type]

    async with app.run_test() as pilot:
        await pilot.pause()
        assert app.session is None
        assert app.load_error == "Cannot connect to http://org.test"
        assert app.query_one("#org-tree", Tree).root.data is None
