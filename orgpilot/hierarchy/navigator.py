"""Drill-down navigation over the organisation tree.

The navigator only pushes and pops; it never re-derives a path from
`manager_id`, so corrupt manager data cannot make it loop. The one place
that does walk `manager_id` (`resolve_manager_chain`, used for deep links)
tracks visited ids and stops at the first repeat.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from orgpilot.models import OrgNode

logger = logging.getLogger(__name__)


@dataclass
class NavigationContext:
    """Focused node plus its ancestor chain (root first, focused node excluded)."""

    focused_node: OrgNode | None
    hierarchy_stack: list[OrgNode] = field(default_factory=list)


def resolve_manager_chain(node: OrgNode, lookup: Mapping[int, OrgNode], root_id: int | None = None) -> list[OrgNode]:
    """Ancestors of node via manager_id, root first, node excluded.

    Stops at root_id, at a manager missing from lookup, or at the first id
    seen twice (a cycle in the backend data; logged, never raised).
    """
    chain: list[OrgNode] = []
    visited = {node.id}
    manager_id = node.manager_id
    while manager_id is not None and node.id != root_id:
        if manager_id in visited:
            logger.warning("Cycle in manager chain of node %d at node %d; truncating", node.id, manager_id)
            break
        manager = lookup.get(manager_id)
        if manager is None:
            break
        visited.add(manager_id)
        chain.append(manager)
        if manager_id == root_id:
            break
        manager_id = manager.manager_id
    chain.reverse()
    return chain


class HierarchyNavigator:
    """Focus state machine: focus_on pushes, navigate_up pops, navigate_to_root resets."""

    def __init__(self, root: OrgNode) -> None:
        self.root = root
        self.context = NavigationContext(focused_node=root)

    @property
    def focused_node(self) -> OrgNode:
        return self.context.focused_node or self.root

    @property
    def hierarchy_stack(self) -> list[OrgNode]:
        return list(self.context.hierarchy_stack)

    @property
    def is_at_root(self) -> bool:
        return self.focused_node.id == self.root.id

    @property
    def can_navigate_up(self) -> bool:
        """Whether the "up one level" affordance should be offered."""
        return not self.is_at_root

    def focus_on(self, node: OrgNode) -> None:
        """Drill into node. Focusing the root is the same as navigate_to_root."""
        if node.id == self.root.id:
            self.navigate_to_root()
            return
        previous = self.context.focused_node
        if previous is not None:
            self.context.hierarchy_stack.append(previous)
        self.context.focused_node = node
        logger.debug("Focused node %d (depth %d)", node.id, len(self.context.hierarchy_stack))

    def navigate_up(self) -> bool:
        """Focus the previous node. Returns False when already at the top of the stack."""
        if not self.context.hierarchy_stack:
            return False
        parent = self.context.hierarchy_stack.pop()
        self.context.focused_node = parent
        if parent.id == self.root.id:
            self.context.hierarchy_stack.clear()
        logger.debug("Navigated up to node %d", parent.id)
        return True

    def navigate_to_root(self) -> None:
        self.context.focused_node = self.root
        self.context.hierarchy_stack.clear()

    def navigate_to(self, node_id: int) -> bool:
        """Jump back to an ancestor on the stack (breadcrumb link)."""
        if node_id == self.root.id:
            self.navigate_to_root()
            return True
        if self.context.focused_node is not None and self.context.focused_node.id == node_id:
            return True
        for index, ancestor in enumerate(self.context.hierarchy_stack):
            if ancestor.id == node_id:
                self.context.focused_node = ancestor
                del self.context.hierarchy_stack[index:]
                return True
        return False

    def focus_path(self, node: OrgNode, lookup: Mapping[int, OrgNode]) -> None:
        """Focus node directly (deep link), rebuilding the stack from manager ids."""
        if node.id == self.root.id:
            self.navigate_to_root()
            return
        chain = resolve_manager_chain(node, lookup, root_id=self.root.id)
        if not chain or chain[0].id != self.root.id:
            chain.insert(0, self.root)
        self.context.hierarchy_stack = chain
        self.context.focused_node = node

    def breadcrumb(self) -> list[OrgNode]:
        """Root-to-focused path."""
        if self.is_at_root:
            return [self.root]
        return [*self.context.hierarchy_stack, self.focused_node]

    def get_breadcrumb(self) -> str:
        return " > ".join(node.full_name for node in self.breadcrumb())
