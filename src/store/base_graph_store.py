# src/store/base_graph_store.py — v1
"""Abstract graph store interface.

The save/load engine only talks to a store through a GraphTransaction:
one transaction per run, committed on success, rolled back otherwise and
closed exactly once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from types import TracebackType
from typing import Any, Literal

from tabgraph.core.models import NodeRecord, RelationshipRecord, StoreId

Direction = Literal["in", "out", "both"]


class StoreError(Exception):
    """Raised when the store cannot be reached or a query fails."""


class GraphTransaction(ABC):
    """Unit of work against a graph store.

    Used as a context manager, the transaction is closed on exit. Closing a
    transaction that was neither committed nor rolled back discards its
    writes.
    """

    # --- Reads ---

    @abstractmethod
    def get_node(self, node_id: StoreId) -> NodeRecord:
        """Look up a node by store id.

        Raises:
            StoreError: If no node has this id.
        """

    @abstractmethod
    def find_nodes(self, label: str) -> Iterator[NodeRecord]:
        """Yield every node carrying *label*."""

    @abstractmethod
    def node_relationships(
        self, node_id: StoreId, direction: Direction = "both"
    ) -> Iterator[RelationshipRecord]:
        """Yield relationships attached to a node, filtered by direction."""

    # --- Writes ---

    @abstractmethod
    def create_node(
        self, labels: Sequence[str], properties: Mapping[str, Any] | None = None
    ) -> StoreId:
        """Create a node and return its store id."""

    @abstractmethod
    def create_relationship(
        self,
        source_id: StoreId,
        destination_id: StoreId,
        rel_type: str,
        properties: Mapping[str, Any] | None = None,
    ) -> StoreId:
        """Create a relationship between two existing nodes and return its id."""

    # --- Lifecycle ---

    @abstractmethod
    def commit(self) -> None:
        """Make the writes of this transaction durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard the writes of this transaction."""

    @abstractmethod
    def close(self) -> None:
        """Release the transaction. Safe to call once the outcome is settled."""

    def __enter__(self) -> GraphTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BaseGraphStore(ABC):
    """Unified interface for graph store backends."""

    @abstractmethod
    def begin_transaction(self) -> GraphTransaction:
        """Open a transaction.

        Raises:
            StoreError: If the store is unreachable.
        """

    @abstractmethod
    def node_count(self) -> int:
        """Return total number of committed nodes."""

    @abstractmethod
    def relationship_count(self) -> int:
        """Return total number of committed relationships."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (memory, neo4j)."""

    def close(self) -> None:
        """Release connections held by the store."""
