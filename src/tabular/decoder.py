# src/tabular/decoder.py — v1
"""Read tabular files back into a graph store.

Node files fill the session's binding table (transient id -> new store id);
relationship files are resolved through it, so every node file must be
read before the first relationship file. A row that cannot be created is
logged and skipped, a relationship whose endpoint is unknown is counted as
skipped without any error.

Session counters move with each created entity, so a file that breaks
partway still accounts for the rows already written to the transaction.
"""

from __future__ import annotations

import csv
import logging
import sys
from collections.abc import Iterator
from typing import Any, TextIO

from tabgraph.codec.value_codec import ValueCodec
from tabgraph.config.settings import Settings
from tabgraph.core.session import ImportSession
from tabgraph.graph.binding_table import BindingError
from tabgraph.store.base_graph_store import GraphTransaction, StoreError

logger = logging.getLogger(__name__)


def _raise_field_limit() -> None:
    """Lift the csv module's 128 KiB cell limit as far as the platform allows."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return
        except OverflowError:
            limit //= 2


_raise_field_limit()


class FileCorruptedError(Exception):
    """Raised when a file header is missing or lacks a required column."""


class RowError(Exception):
    """Raised when a single row cannot be turned into an entity."""


class TabularDecoder:
    """Create store entities from tabular file streams.

    Args:
        settings: Delimiter and reserved column names.
        codec: Value codec. Built from settings when None.
    """

    def __init__(self, settings: Settings, codec: ValueCodec | None = None) -> None:
        self._settings = settings
        self._codec = codec or ValueCodec(delimiter=settings.csv_delimiter)

    # --- Parsing ---

    def _read_header(self, reader: Iterator[list[str]], required: tuple[str, ...]) -> list[str]:
        raw = next(reader, None)
        if not raw or all(not cell.strip() for cell in raw):
            raise FileCorruptedError("No header found in file.")
        header = [cell.strip() for cell in raw]
        header[0] = header[0].lstrip("\ufeff")
        if len(set(header)) != len(header):
            raise FileCorruptedError(f"Duplicate column names in header: {header}")
        missing = [col for col in required if col not in header]
        if missing:
            raise FileCorruptedError(f"Missing required column(s): {', '.join(missing)}")
        return header

    def _rows(self, reader: Iterator[list[str]]) -> Iterator[tuple[int, list[str]]]:
        """Yield (line number, cells), skipping blank lines."""
        for row in reader:
            if not row or all(cell == "" for cell in row):
                continue
            yield reader.line_num, row  # type: ignore[attr-defined]

    @staticmethod
    def _record(header: list[str], row: list[str]) -> dict[str, str]:
        if len(row) > len(header) and any(cell.strip() for cell in row[len(header):]):
            raise RowError(f"{len(row)} cells for {len(header)} columns")
        cells = row[: len(header)] + [""] * (len(header) - len(row))
        return dict(zip(header, cells))

    def _properties(self, record: dict[str, str], skip: tuple[str, ...]) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        for key, text in record.items():
            if key in skip:
                continue
            value = self._codec.decode(text)
            if value is not None:
                properties[key] = value
        return properties

    def _reader(self, stream: TextIO) -> Iterator[list[str]]:
        return csv.reader(stream, delimiter=self._settings.csv_delimiter)

    # --- Nodes ---

    def read_node_file(
        self, tx: GraphTransaction, session: ImportSession, label: str, stream: TextIO
    ) -> int:
        """Create one node per row and bind its transient id.

        Returns:
            Number of nodes created from this file.

        Raises:
            FileCorruptedError: If the header is empty or has no index column.
        """
        index_col = self._settings.index_column
        reader = self._reader(stream)
        header = self._read_header(reader, (index_col,))

        created = 0
        for line_no, row in self._rows(reader):
            try:
                record = self._record(header, row)
                transient_id = record[index_col].strip()
                if not transient_id:
                    raise RowError("empty id")
                if transient_id in session.bindings:
                    raise RowError(f"duplicate id {transient_id!r}")
                properties = self._properties(record, (index_col,))
                store_id = tx.create_node([label], properties)
                session.bindings.bind(transient_id, store_id)
            except (RowError, StoreError, BindingError) as e:
                logger.error("Node row %d of label %s skipped: %s", line_no, label, e)
                session.rows_failed += 1
                continue
            created += 1
            session.nodes_created += 1

        logger.info("Created %d node(s) with label %s", created, label)
        return created

    # --- Relationships ---

    def read_relationship_file(
        self, tx: GraphTransaction, session: ImportSession, rel_type: str, stream: TextIO
    ) -> int:
        """Create one relationship per row whose two endpoints are bound.

        Returns:
            Number of relationships created from this file.

        Raises:
            FileCorruptedError: If the source or destination column is missing.
            RuntimeError: If called before the node pass sealed the binding table.
        """
        if not session.bindings.sealed:
            raise RuntimeError("Relationship files must be read after every node file")

        source_col = self._settings.source_column
        destination_col = self._settings.destination_column
        reader = self._reader(stream)
        header = self._read_header(reader, (source_col, destination_col))

        created = 0
        skipped = 0
        for line_no, row in self._rows(reader):
            try:
                record = self._record(header, row)
                source_id = session.bindings.resolve(record[source_col].strip())
                destination_id = session.bindings.resolve(record[destination_col].strip())
                if source_id is None or destination_id is None:
                    skipped += 1
                    session.relationships_skipped += 1
                    continue
                properties = self._properties(record, (source_col, destination_col))
                tx.create_relationship(source_id, destination_id, rel_type, properties)
            except (RowError, StoreError) as e:
                logger.error(
                    "Relationship row %d of type %s skipped: %s", line_no, rel_type, e
                )
                session.rows_failed += 1
                continue
            created += 1
            session.relationships_created += 1

        logger.info(
            "Created %d relationship(s) of type %s, %d without both endpoints",
            created, rel_type, skipped,
        )
        return created
