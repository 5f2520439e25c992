# src/tabular/encoder.py — v1
"""Write node categories and relationship types as delimited text files.

Node file:          id;<sorted property keys>
Relationship file:  source;destination;<sorted property keys>

The id columns hold transient ids (the store ids of this export session);
an absent property leaves its cell empty.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TextIO

from tabgraph.codec.value_codec import ValueCodec
from tabgraph.config.settings import Settings
from tabgraph.core.models import EncodedFile, FileKind, RelationshipRecord
from tabgraph.core.session import ExportSession
from tabgraph.store.base_graph_store import GraphTransaction
from tabgraph.tabular.naming import TabularNaming
from tabgraph.tabular.schema import SchemaAggregator, header_union

logger = logging.getLogger(__name__)


class NoEntitiesError(Exception):
    """Raised when a requested category has no node in the store."""


class InvalidCategoryError(ValueError):
    """Raised when a category name cannot be used in a file name."""


def close_all(handles: Mapping[str, TextIO]) -> list[str]:
    """Close every handle, logging failures instead of raising.

    Returns:
        Names whose handle failed to close.
    """
    failed: list[str] = []
    for name, handle in handles.items():
        try:
            handle.close()
        except OSError:
            logger.exception("Failed to close file for %s", name)
            failed.append(name)
    return failed


class TabularEncoder:
    """Serialize store entities into tabular files.

    Args:
        settings: Delimiter, file naming and reserved column names.
        codec: Value codec. Built from settings when None.
    """

    def __init__(self, settings: Settings, codec: ValueCodec | None = None) -> None:
        self._settings = settings
        self._codec = codec or ValueCodec(
            delimiter=settings.csv_delimiter, trim_values=settings.trim_values
        )
        self._naming = TabularNaming(settings)

    def _writer(self, handle: TextIO) -> Any:
        return csv.writer(
            handle,
            delimiter=self._settings.csv_delimiter,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )

    def _cells(self, properties: Mapping[str, Any], header: list[str]) -> list[str]:
        return [self._codec.encode(properties.get(key)) for key in header]

    # --- Nodes ---

    def write_node_category(
        self,
        tx: GraphTransaction,
        session: ExportSession,
        category: str,
        directory: Path,
    ) -> EncodedFile | None:
        """Write every not-yet-exported node of *category* to its file.

        Returns:
            The written file, or None when every node of the category was
            already written under another category.

        Raises:
            InvalidCategoryError: If the category cannot be a file name.
            NoEntitiesError: If the store holds no node of this category.
        """
        if not self._naming.is_valid_category(category):
            raise InvalidCategoryError(f"Invalid category name: {category!r}")

        nodes = list(tx.find_nodes(category))
        if not nodes:
            raise NoEntitiesError(f"No nodes found with label : {category}")

        fresh = [n for n in nodes if not session.is_visited(n.id)]
        if not fresh:
            logger.info(
                "All %d node(s) of %s were already exported under another label",
                len(nodes), category,
            )
            return None

        header = header_union(
            (n.properties for n in fresh), reserved=self._settings.reserved_columns
        )
        filename = self._naming.node_filename(category)
        logger.info("Writing %d node(s) to %s", len(fresh), filename)

        with (directory / filename).open("w", newline="", encoding="utf-8") as handle:
            writer = self._writer(handle)
            writer.writerow([self._settings.index_column, *header])
            for node in fresh:
                writer.writerow([str(node.id), *self._cells(node.properties, header)])
                session.mark_visited(node.id, category)

        session.add_file(filename)
        return EncodedFile(
            filename=filename,
            category=category,
            kind=FileKind.NODE,
            header=[self._settings.index_column, *header],
            rows=len(fresh),
            entity_ids=[n.id for n in fresh],
        )

    # --- Relationships ---

    def collect_relationships(
        self, tx: GraphTransaction, session: ExportSession
    ) -> tuple[list[RelationshipRecord], dict[str, list[str]]]:
        """First pass: relationships between exported nodes and their headers by type."""
        relationships: list[RelationshipRecord] = []
        aggregators: dict[str, SchemaAggregator] = {}

        for node_id in list(session.visited_node_ids):
            for rel in tx.node_relationships(node_id, direction="out"):
                if not session.is_visited(rel.destination_id):
                    continue
                relationships.append(rel)
                aggregator = aggregators.setdefault(
                    rel.type, SchemaAggregator(self._settings.reserved_columns)
                )
                aggregator.add(rel.properties)

        headers = {rel_type: agg.header for rel_type, agg in aggregators.items()}
        return relationships, headers

    def write_relationships(
        self, tx: GraphTransaction, session: ExportSession, directory: Path
    ) -> list[EncodedFile]:
        """Write relationships whose two endpoints were exported, one file per type.

        Types that cannot be used in a file name are recorded in
        ``session.failures`` and skipped.
        """
        relationships, headers = self.collect_relationships(tx, session)
        logger.info(
            "Writing %d relationship(s) of %d type(s)", len(relationships), len(headers)
        )

        rejected = sorted(t for t in headers if not self._naming.is_valid_category(t))
        for rel_type in rejected:
            logger.error("Relationship type %r cannot be used as a file name", rel_type)
            session.failures.append(f"Error : Invalid relationship type : {rel_type}")

        handles: dict[str, TextIO] = {}
        writers: dict[str, Any] = {}
        files: dict[str, EncodedFile] = {}
        source_col = self._settings.source_column
        destination_col = self._settings.destination_column
        try:
            for rel in relationships:
                if rel.type in rejected:
                    continue
                header = headers[rel.type]
                if rel.type not in writers:
                    filename = self._naming.relationship_filename(rel.type)
                    handle = (directory / filename).open("w", newline="", encoding="utf-8")
                    handles[rel.type] = handle
                    writers[rel.type] = self._writer(handle)
                    writers[rel.type].writerow([source_col, destination_col, *header])
                    files[rel.type] = EncodedFile(
                        filename=filename,
                        category=rel.type,
                        kind=FileKind.RELATIONSHIP,
                        header=[source_col, destination_col, *header],
                    )
                    session.add_file(filename)
                writers[rel.type].writerow(
                    [
                        str(rel.source_id),
                        str(rel.destination_id),
                        *self._cells(rel.properties, header),
                    ]
                )
                files[rel.type].rows += 1
                files[rel.type].entity_ids.append(rel.id)
        finally:
            close_all(handles)

        return list(files.values())
