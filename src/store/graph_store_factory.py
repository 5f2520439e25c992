# src/store/graph_store_factory.py — v1
"""Factory: instantiate graph store from configuration."""

from __future__ import annotations

import logging

from tabgraph.config.settings import Settings
from tabgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


class UnsupportedGraphStoreError(ValueError):
    """Raised when a graph store type is not supported."""


def create_graph_store(settings: Settings) -> BaseGraphStore:
    """Instantiate the configured graph store.

    Args:
        settings: Application settings (GRAPH_DB_TYPE and connection fields).

    Returns:
        Configured BaseGraphStore instance.

    Raises:
        UnsupportedGraphStoreError: If type is not supported.
    """
    db_type = settings.graph_db_type
    logger.debug("Creating %s graph store", db_type)

    if db_type == "memory":
        from tabgraph.store.memory_store import MemoryGraphStore
        return MemoryGraphStore()

    if db_type == "neo4j":
        from tabgraph.store.neo4j_store import Neo4jStore
        return Neo4jStore(
            uri=settings.graph_db_uri,
            user=settings.graph_db_user,
            password=settings.graph_db_password,
            database=settings.graph_db_database,
        )

    raise UnsupportedGraphStoreError(
        f"Unsupported graph store type: {db_type!r}. "
        f"Available: memory, neo4j"
    )
