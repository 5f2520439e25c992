# src/store/neo4j_store.py — v1
"""Neo4j graph store adapter.

Uses the neo4j Python driver with explicit transactions.
Requires: pip install neo4j.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tabgraph.codec.temporal import zone_name
from tabgraph.core.models import NodeRecord, RelationshipRecord, StoreId
from tabgraph.store.base_graph_store import (
    BaseGraphStore,
    Direction,
    GraphTransaction,
    StoreError,
)

logger = logging.getLogger(__name__)

_RELATIONSHIP_PATTERNS: dict[str, str] = {
    "out": "(n)-[r]->(m)",
    "in": "(n)<-[r]-(m)",
    "both": "(n)-[r]-(m)",
}


def _quote(name: str) -> str:
    """Quote a label or relationship type for Cypher."""
    return "`" + name.replace("`", "``") + "`"


def _to_native(value: Any) -> Any:
    """Convert neo4j.time values (and lists of them) to standard library types."""
    if isinstance(value, list):
        return [_to_native(v) for v in value]
    to_native = getattr(value, "to_native", None)
    if callable(to_native):
        value = to_native()
    # Named zones come back as pytz objects; keep them as zoneinfo.
    if isinstance(value, datetime) and value.tzinfo is not None:
        if not isinstance(value.tzinfo, ZoneInfo):
            name = zone_name(value.tzinfo)
            if name:
                try:
                    return value.astimezone(ZoneInfo(name))
                except ZoneInfoNotFoundError:
                    logger.debug("No zoneinfo entry for %s, keeping driver zone", name)
    return value


def _native_properties(props: Mapping[str, Any]) -> dict[str, Any]:
    return {key: _to_native(value) for key, value in props.items()}


class Neo4jTransaction(GraphTransaction):
    """Explicit Neo4j transaction bound to one driver session."""

    def __init__(self, session: Any) -> None:
        self._session = session
        self._tx = session.begin_transaction()

    def _run(self, query: str, **params: Any) -> list[dict[str, Any]]:
        """Execute a Cypher query and return results as list of dicts."""
        try:
            result = self._tx.run(query, **params)
            return [record.data() for record in result]
        except Exception as e:
            raise StoreError(f"Neo4j query failed: {e}") from e

    # --- Reads ---

    def get_node(self, node_id: StoreId) -> NodeRecord:
        rows = self._run(
            "MATCH (n) WHERE elementId(n) = $id "
            "RETURN elementId(n) AS id, labels(n) AS labels, properties(n) AS props",
            id=node_id,
        )
        if not rows:
            raise StoreError(f"No node with id {node_id!r}")
        row = rows[0]
        return NodeRecord(
            id=row["id"], labels=row["labels"], properties=_native_properties(row["props"])
        )

    def find_nodes(self, label: str) -> Iterator[NodeRecord]:
        rows = self._run(
            f"MATCH (n:{_quote(label)}) "
            "RETURN elementId(n) AS id, labels(n) AS labels, properties(n) AS props"
        )
        for row in rows:
            yield NodeRecord(
                id=row["id"], labels=row["labels"], properties=_native_properties(row["props"])
            )

    def node_relationships(
        self, node_id: StoreId, direction: Direction = "both"
    ) -> Iterator[RelationshipRecord]:
        pattern = _RELATIONSHIP_PATTERNS[direction]
        rows = self._run(
            f"MATCH {pattern} WHERE elementId(n) = $id "
            "RETURN DISTINCT elementId(r) AS id, type(r) AS type, "
            "elementId(startNode(r)) AS source, elementId(endNode(r)) AS destination, "
            "properties(r) AS props",
            id=node_id,
        )
        for row in rows:
            yield RelationshipRecord(
                id=row["id"],
                type=row["type"],
                source_id=row["source"],
                destination_id=row["destination"],
                properties=_native_properties(row["props"]),
            )

    # --- Writes ---

    def create_node(
        self, labels: Sequence[str], properties: Mapping[str, Any] | None = None
    ) -> StoreId:
        label_clause = "".join(f":{_quote(label)}" for label in labels)
        rows = self._run(
            f"CREATE (n{label_clause}) SET n = $props RETURN elementId(n) AS id",
            props=dict(properties or {}),
        )
        return rows[0]["id"]

    def create_relationship(
        self,
        source_id: StoreId,
        destination_id: StoreId,
        rel_type: str,
        properties: Mapping[str, Any] | None = None,
    ) -> StoreId:
        rows = self._run(
            "MATCH (a), (b) WHERE elementId(a) = $src AND elementId(b) = $dst "
            f"CREATE (a)-[r:{_quote(rel_type)}]->(b) SET r = $props "
            "RETURN elementId(r) AS id",
            src=source_id,
            dst=destination_id,
            props=dict(properties or {}),
        )
        if not rows:
            raise StoreError(
                f"Endpoints {source_id!r} -> {destination_id!r} not found"
            )
        return rows[0]["id"]

    # --- Lifecycle ---

    def commit(self) -> None:
        try:
            self._tx.commit()
        except Exception as e:
            raise StoreError(f"Neo4j commit failed: {e}") from e

    def rollback(self) -> None:
        try:
            self._tx.rollback()
        except Exception as e:
            raise StoreError(f"Neo4j rollback failed: {e}") from e

    def close(self) -> None:
        try:
            self._tx.close()
        finally:
            self._session.close()


class Neo4jStore(BaseGraphStore):
    """Graph store backed by Neo4j."""

    def __init__(
        self,
        uri: str = "bolt://localhost:7687",
        user: str = "",
        password: str = "",
        database: str = "neo4j",
    ) -> None:
        try:
            from neo4j import GraphDatabase
        except ImportError as e:
            raise ImportError(
                "neo4j package required: pip install neo4j"
            ) from e

        auth = (user, password) if user else None
        self._driver = GraphDatabase.driver(uri, auth=auth)
        self._database = database

    def begin_transaction(self) -> Neo4jTransaction:
        try:
            session = self._driver.session(database=self._database)
        except Exception as e:
            raise StoreError(f"Cannot open Neo4j session: {e}") from e
        try:
            return Neo4jTransaction(session)
        except Exception as e:
            session.close()
            raise StoreError(f"Cannot begin Neo4j transaction: {e}") from e

    def _count(self, query: str) -> int:
        try:
            records, _, _ = self._driver.execute_query(
                query, database_=self._database
            )
        except Exception as e:
            raise StoreError(f"Neo4j query failed: {e}") from e
        return records[0]["cnt"] if records else 0

    def node_count(self) -> int:
        return self._count("MATCH (n) RETURN count(n) AS cnt")

    def relationship_count(self) -> int:
        return self._count("MATCH ()-[r]->() RETURN count(r) AS cnt")

    @property
    def provider_name(self) -> str:
        return "neo4j"

    def close(self) -> None:
        """Close the driver connection."""
        self._driver.close()
