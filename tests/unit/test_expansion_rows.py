"""Unit tests for ExpansionState and list-view row building."""

from unittest.mock import AsyncMock

import pytest

from orgpilot.hierarchy import ExpansionState, NodeFetchCache, build_rows
from orgpilot.models import OrgNode


def _node(node_id: int, reports: int = 0) -> OrgNode:
    return OrgNode(id=node_id, full_name=f"Person {node_id}", direct_reports_count=reports)


ROOT = _node(1, reports=2)
MANAGER = _node(2, reports=1)
IC = _node(3)
REPORT = _node(4)


@pytest.fixture
def cache():
    fetch = AsyncMock(return_value=[REPORT])
    cache = NodeFetchCache(fetch)
    cache.seed(ROOT.id, [MANAGER, IC])
    return cache


@pytest.mark.unit
def test_only_root_starts_expanded():
    state = ExpansionState(ROOT.id)
    assert state.is_expanded(ROOT.id)
    assert not state.is_expanded(MANAGER.id)
    assert state.expanded_ids() == {ROOT.id}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_expanding_fetches_when_nothing_cached(cache):
    state = ExpansionState(ROOT.id)

    assert await state.toggle(MANAGER, cache) is True
    assert [n.id for n in cache.peek(MANAGER.id)] == [REPORT.id]

    assert await state.toggle(MANAGER, cache) is False
    assert await state.toggle(MANAGER, cache) is True
    assert cache.fetch_count == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_expanding_leaf_does_not_fetch(cache):
    state = ExpansionState(ROOT.id)
    await state.toggle(IC, cache)
    assert cache.fetch_count == 0


@pytest.mark.unit
def test_expand_and_collapse_all():
    state = ExpansionState(ROOT.id)
    state.expand_all([2, 3])
    assert state.expanded_ids() == {1, 2, 3}
    state.collapse_all()
    assert state.expanded_ids() == set()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_rows_follow_expansion(cache):
    state = ExpansionState(ROOT.id)

    rows = build_rows(ROOT, cache, state)
    assert [(r.node.id, r.depth) for r in rows] == [(1, 0), (2, 1), (3, 1)]
    assert rows[1].has_reports and not rows[1].expanded
    assert not rows[2].has_reports

    await state.toggle(MANAGER, cache)
    rows = build_rows(ROOT, cache, state)
    assert [(r.node.id, r.depth) for r in rows] == [(1, 0), (2, 1), (4, 2), (3, 1)]
    assert rows[1].expanded


@pytest.mark.unit
def test_rows_never_fetch(cache):
    state = ExpansionState(ROOT.id)
    state.expand_all([MANAGER.id])
    rows = build_rows(ROOT, cache, state)
    assert [r.node.id for r in rows] == [1, 2, 3]
    assert cache.fetch_count == 0


@pytest.mark.unit
def test_rows_render_repeated_node_once():
    cache = NodeFetchCache(AsyncMock())
    looping_child = _node(2, reports=1)
    cache.seed(1, [looping_child])
    cache.seed(2, [ROOT])
    state = ExpansionState(1)
    state.expand_all([2])

    rows = build_rows(ROOT, cache, state)

    assert [r.node.id for r in rows] == [1, 2]
