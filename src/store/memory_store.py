# src/store/memory_store.py — v1
"""In-memory graph store backed by a NetworkX MultiDiGraph.

Nodes carry ``labels`` and ``properties`` attributes, edges are keyed by
relationship id and carry ``type`` and ``properties``. A transaction works
on a private deep copy of the committed graph which replaces it on commit.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import networkx as nx

from tabgraph.core.models import NodeRecord, RelationshipRecord, StoreId
from tabgraph.store.base_graph_store import (
    BaseGraphStore,
    Direction,
    GraphTransaction,
    StoreError,
)

logger = logging.getLogger(__name__)


class MemoryTransaction(GraphTransaction):
    """Transaction over a snapshot of a MemoryGraphStore."""

    def __init__(self, store: MemoryGraphStore) -> None:
        self._store = store
        self._graph: nx.MultiDiGraph = copy.deepcopy(store.graph)
        self._next_node_id = store._next_node_id
        self._next_rel_id = store._next_rel_id
        self._open = True

    def _check_open(self) -> None:
        if not self._open:
            raise StoreError("Transaction is closed")

    @staticmethod
    def _node_record(node_id: int, data: dict[str, Any]) -> NodeRecord:
        return NodeRecord(
            id=node_id,
            labels=list(data["labels"]),
            properties=dict(data["properties"]),
        )

    # --- Reads ---

    def get_node(self, node_id: StoreId) -> NodeRecord:
        self._check_open()
        if node_id not in self._graph:
            raise StoreError(f"No node with id {node_id!r}")
        return self._node_record(node_id, self._graph.nodes[node_id])  # type: ignore[arg-type]

    def find_nodes(self, label: str) -> Iterator[NodeRecord]:
        self._check_open()
        for node_id, data in list(self._graph.nodes(data=True)):
            if label in data["labels"]:
                yield self._node_record(node_id, data)

    def node_relationships(
        self, node_id: StoreId, direction: Direction = "both"
    ) -> Iterator[RelationshipRecord]:
        self._check_open()
        if node_id not in self._graph:
            raise StoreError(f"No node with id {node_id!r}")

        edges: list[tuple[int, int, int, dict[str, Any]]] = []
        if direction in ("out", "both"):
            edges.extend(self._graph.out_edges(node_id, keys=True, data=True))
        if direction in ("in", "both"):
            # A self-loop is already listed as an outgoing edge.
            edges.extend(
                (u, v, k, d)
                for u, v, k, d in self._graph.in_edges(node_id, keys=True, data=True)
                if direction == "in" or u != v
            )

        for source, destination, rel_id, data in sorted(edges, key=lambda e: e[2]):
            yield RelationshipRecord(
                id=rel_id,
                type=data["type"],
                source_id=source,
                destination_id=destination,
                properties=dict(data["properties"]),
            )

    # --- Writes ---

    def create_node(
        self, labels: Sequence[str], properties: Mapping[str, Any] | None = None
    ) -> StoreId:
        self._check_open()
        node_id = self._next_node_id
        self._next_node_id += 1
        self._graph.add_node(
            node_id, labels=list(labels), properties=dict(properties or {})
        )
        return node_id

    def create_relationship(
        self,
        source_id: StoreId,
        destination_id: StoreId,
        rel_type: str,
        properties: Mapping[str, Any] | None = None,
    ) -> StoreId:
        self._check_open()
        for endpoint in (source_id, destination_id):
            if endpoint not in self._graph:
                raise StoreError(f"No node with id {endpoint!r}")
        rel_id = self._next_rel_id
        self._next_rel_id += 1
        self._graph.add_edge(
            source_id,
            destination_id,
            key=rel_id,
            type=rel_type,
            properties=dict(properties or {}),
        )
        return rel_id

    # --- Lifecycle ---

    def commit(self) -> None:
        self._check_open()
        self._store._publish(self._graph, self._next_node_id, self._next_rel_id)

    def rollback(self) -> None:
        self._check_open()
        self._graph = copy.deepcopy(self._store.graph)
        self._next_node_id = self._store._next_node_id
        self._next_rel_id = self._store._next_rel_id

    def close(self) -> None:
        self._open = False


class MemoryGraphStore(BaseGraphStore):
    """Graph store held in process memory. Used by tests and dry runs."""

    def __init__(self) -> None:
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._next_node_id = 0
        self._next_rel_id = 0

    def _publish(
        self,
        graph: nx.MultiDiGraph,
        next_node_id: int,
        next_rel_id: int,
    ) -> None:
        self.graph = copy.deepcopy(graph)
        self._next_node_id = next_node_id
        self._next_rel_id = next_rel_id
        logger.debug(
            "Committed memory graph: %d nodes, %d relationships",
            self.graph.number_of_nodes(), self.graph.number_of_edges(),
        )

    def begin_transaction(self) -> MemoryTransaction:
        return MemoryTransaction(self)

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def relationship_count(self) -> int:
        return self.graph.number_of_edges()

    def label_count(self, label: str) -> int:
        """Number of committed nodes carrying *label*."""
        return sum(1 for _, d in self.graph.nodes(data=True) if label in d["labels"])

    def type_count(self, rel_type: str) -> int:
        """Number of committed relationships of *rel_type*."""
        return sum(
            1 for _, _, d in self.graph.edges(data=True) if d["type"] == rel_type
        )

    @property
    def provider_name(self) -> str:
        return "memory"
