"""Expanded/collapsed state of list-view rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from orgpilot.hierarchy.cache import NodeFetchCache
from orgpilot.models import OrgNode

logger = logging.getLogger(__name__)


class ExpansionState:
    """Node id -> expanded flag; only the root starts expanded."""

    def __init__(self, root_id: int) -> None:
        self.root_id = root_id
        self._expanded: dict[int, bool] = {root_id: True}

    def is_expanded(self, node_id: int) -> bool:
        return self._expanded.get(node_id, False)

    async def toggle(self, node: OrgNode, cache: NodeFetchCache) -> bool:
        """Flip a node's state; expanding loads its children first when none are cached.

        Returns the new expanded state. Collapsing never touches the network,
        and a fetch that is still running when the node collapses is left to
        finish and fill the cache.
        """
        expanding = not self.is_expanded(node.id)
        if expanding and not cache.peek(node.id):
            await cache.children_of(node)
        self._expanded[node.id] = expanding
        logger.debug("%s node %d", "Expanded" if expanding else "Collapsed", node.id)
        return expanding

    def expand_all(self, node_ids: Iterable[int]) -> None:
        for node_id in node_ids:
            self._expanded[node_id] = True

    def collapse_all(self) -> None:
        self._expanded = {node_id: False for node_id in self._expanded}

    def expanded_ids(self) -> set[int]:
        return {node_id for node_id, expanded in self._expanded.items() if expanded}
