# src/graph/frontier.py — v1
"""Category frontier for neighbor-aware export.

Breadth-first walk at category granularity: the open queue starts with
the requested categories, each popped category is closed at once, and
when neighbor discovery is enabled the categories of nodes adjacent to
every exported node are appended at the back. Every category is yielded
at most once, so the walk ends on any finite graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from tabgraph.core.models import StoreId
from tabgraph.core.session import ExportSession
from tabgraph.store.base_graph_store import GraphTransaction

logger = logging.getLogger(__name__)


class FrontierExplorer:
    """Decide which node categories an export visits, and in which order.

    Args:
        tx: Open store transaction.
        session: Export session owning the open/closed category sets.
        consider_neighbors: Expand the frontier through relationships.
    """

    def __init__(
        self,
        tx: GraphTransaction,
        session: ExportSession,
        consider_neighbors: bool = False,
    ) -> None:
        self._tx = tx
        self._session = session
        self._consider_neighbors = consider_neighbors

    def __iter__(self) -> Iterator[str]:
        session = self._session
        while session.open_categories:
            category = session.open_categories.popleft()
            session.closed_categories.add(category)
            yield category

    def discover_from(self, node_ids: Iterable[StoreId]) -> list[str]:
        """Queue the unseen categories of the neighbors of *node_ids*.

        Returns the newly queued categories (empty when discovery is off).
        """
        if not self._consider_neighbors:
            return []

        session = self._session
        added: list[str] = []
        for node_id in node_ids:
            for rel in self._tx.node_relationships(node_id, direction="both"):
                other = self._tx.get_node(rel.other_end(node_id))
                for label in other.labels:
                    if label in session.closed_categories or label in session.open_categories:
                        continue
                    session.open_categories.append(label)
                    added.append(label)

        if added:
            logger.info("Discovered neighbor categories: %s", ", ".join(added))
        return added
