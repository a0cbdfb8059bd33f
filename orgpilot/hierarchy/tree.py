"""Flatten the cached hierarchy into list-view rows."""

from __future__ import annotations

from dataclasses import dataclass

from orgpilot.hierarchy.cache import NodeFetchCache
from orgpilot.hierarchy.expansion import ExpansionState
from orgpilot.models import OrgNode


@dataclass(frozen=True)
class OrgRow:
    """One rendered row of the list view."""

    node: OrgNode
    depth: int
    expanded: bool
    loading: bool
    has_reports: bool


def build_rows(root: OrgNode, cache: NodeFetchCache, expansion: ExpansionState) -> list[OrgRow]:
    """Depth-first rows starting at root.

    Only cached children are used; building rows never fetches. A node id
    that appears twice (corrupt data) is rendered once and not descended into
    again.
    """
    rows: list[OrgRow] = []
    seen: set[int] = set()

    def visit(node: OrgNode, depth: int) -> None:
        if node.id in seen:
            return
        seen.add(node.id)

        children = cache.peek(node.id) or []
        has_reports = not node.is_leaf or bool(children)
        expanded = has_reports and expansion.is_expanded(node.id)
        rows.append(
            OrgRow(
                node=node,
                depth=depth,
                expanded=expanded,
                loading=cache.is_loading(node.id),
                has_reports=has_reports,
            )
        )
        if expanded:
            for child in children:
                visit(child, depth + 1)

    visit(root, 0)
    return rows
