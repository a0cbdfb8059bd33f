"""Lazily populated cache of each node's direct reports.

The cache trusts a non-empty entry for its whole lifetime: a hit never goes
back to the network even if the backend has changed since. Each node id has
a `loading` gate so that at most one fetch per id is in flight; callers that
arrive while a fetch is running get an empty list and are expected to ask
again once the fetch settles (re-render), which is then a cache hit.
Failures never propagate: they are logged and read as "no reports", and the
entry stays retryable because an empty entry does not satisfy the hit check.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from orgpilot.models import OrgNode

logger = logging.getLogger(__name__)

FetchChildren = Callable[[int], Awaitable[list[OrgNode]]]
CacheListener = Callable[[int, list[OrgNode]], None]


@dataclass
class CacheEntry:
    """Children of one node plus its in-flight gate."""

    children: list[OrgNode] = field(default_factory=list)
    loading: bool = False
    fetched_at: datetime | None = None


class NodeFetchCache:
    """Node id -> direct reports, filled on demand through a fetch collaborator."""

    def __init__(self, fetch_children: FetchChildren, *, fetch_timeout_s: float | None = None) -> None:
        """Initialize cache.

        Args:
            fetch_children: Coroutine function returning the children of a node id
            fetch_timeout_s: Give up on a fetch after this many seconds (None waits forever)
        """
        self._fetch_children = fetch_children
        self.fetch_timeout_s = fetch_timeout_s
        self._entries: dict[int, CacheEntry] = {}
        self._subscribers: list[CacheListener] = []
        self.fetch_count = 0

    def seed(self, node_id: int, children: list[OrgNode]) -> None:
        """Pre-populate an entry from server-provided page data."""
        entry = self._entries.setdefault(node_id, CacheEntry())
        entry.children = list(children)
        entry.fetched_at = datetime.now(timezone.utc)

    def peek(self, node_id: int) -> list[OrgNode] | None:
        """Cached children without fetching; None when nothing was stored yet."""
        entry = self._entries.get(node_id)
        if entry is None or entry.fetched_at is None:
            return None
        return list(entry.children)

    def is_loading(self, node_id: int) -> bool:
        entry = self._entries.get(node_id)
        return entry is not None and entry.loading

    def invalidate(self, node_id: int) -> None:
        """Forget a node's children so the next ensure_children refetches.

        An in-flight fetch keeps its gate and still writes its result.
        """
        entry = self._entries.get(node_id)
        if entry is None:
            return
        if entry.loading:
            entry.children = []
            entry.fetched_at = None
        else:
            del self._entries[node_id]
        logger.debug("Invalidated children of node %d", node_id)

    async def ensure_children(self, node_id: int) -> list[OrgNode]:
        """Return the children of node_id, fetching them at most once at a time."""
        entry = self._entries.get(node_id)
        if entry is not None and entry.children:
            return list(entry.children)
        if entry is not None and entry.loading:
            logger.debug("Fetch for node %d already in flight", node_id)
            return []

        entry = self._entries.setdefault(node_id, CacheEntry())
        entry.loading = True
        self.fetch_count += 1
        try:
            children = await self._fetch(node_id)
        except asyncio.CancelledError:
            entry.loading = False
            raise
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to load direct reports for node %d: %s", node_id, e)
            entry.loading = False
            return []

        entry.loading = False
        entry.children = list(children)
        entry.fetched_at = datetime.now(timezone.utc)
        logger.debug("Cached %d children for node %d", len(children), node_id)
        self._notify(node_id, entry.children)
        return list(children)

    async def children_of(self, node: OrgNode) -> list[OrgNode]:
        """Children of a node, without touching the network for leaves."""
        if node.is_leaf:
            cached = self.peek(node.id)
            return cached if cached is not None else []
        return await self.ensure_children(node.id)

    async def _fetch(self, node_id: int) -> list[OrgNode]:
        if self.fetch_timeout_s is None:
            return await self._fetch_children(node_id)
        return await asyncio.wait_for(self._fetch_children(node_id), timeout=self.fetch_timeout_s)

    def subscribe(self, callback: CacheListener) -> None:
        """Register callback(node_id, children) fired when a fetch populates an entry."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: CacheListener) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self, node_id: int, children: list[OrgNode]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(node_id, list(children))
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Cache subscriber failed for node %d: %s", node_id, e, exc_info=True)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
