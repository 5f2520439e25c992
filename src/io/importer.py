# src/io/importer.py — v1
"""Load orchestrator: archive or directory -> graph store.

Stages:
  1. Validate the input path
  2. Open the source and classify its entries by file name
  3. Node pass, then relationship pass, in one write transaction
  4. Commit

Relationship rows reference node rows by transient id, so the binding
table is sealed between the two passes and no relationship file is read
before every node file has been.
"""

from __future__ import annotations

import csv
import logging
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from tabgraph.archive.packager import ArchiveError
from tabgraph.archive.sources import BaseArchiveSource, open_archive_source
from tabgraph.config.settings import Settings
from tabgraph.core.models import FileKind, ImportSummary, RunStage
from tabgraph.core.session import ImportSession
from tabgraph.io.run_state import RunFailedError, RunTracker, rollback_quietly
from tabgraph.logging.context import clear_context, set_category_context, set_run_context
from tabgraph.store.base_graph_store import BaseGraphStore, GraphTransaction, StoreError
from tabgraph.tabular.decoder import FileCorruptedError, TabularDecoder
from tabgraph.tabular.naming import TabularNaming

logger = logging.getLogger(__name__)

# Problems confined to one file: the file is ignored, the run goes on.
_FILE_ERRORS = (FileCorruptedError, OSError, UnicodeDecodeError, csv.Error, zipfile.BadZipFile)


class ImportOrchestrator:
    """Import node and relationship files into a graph store.

    Args:
        store: Graph store to write to.
        settings: Application settings. Loaded from .env if None.
    """

    def __init__(self, store: BaseGraphStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or Settings()
        self._naming = TabularNaming(self._settings)

    def load(self, path: str | Path) -> ImportSummary:
        """Run one import from a zip archive or a directory.

        Returns:
            ImportSummary of a run that reached DONE.

        Raises:
            RunFailedError: If the path is missing, the source unreadable,
                the store unreachable or no candidate file could be read.
        """
        session = ImportSession()
        summary = ImportSummary(run_id=session.run_id)
        tracker = RunTracker(summary, "load")
        set_run_context(session.run_id, "load")
        source_path = Path(path).expanduser()
        logger.info("Loading %s", source_path)

        try:
            tracker.advance(RunStage.VALIDATING_PATH)
            if not source_path.exists():
                raise tracker.fail(f"Input file or folder not found at: {source_path}")

            tracker.advance(RunStage.UNPACKING)
            try:
                source = open_archive_source(source_path)
            except ArchiveError as e:
                raise tracker.fail(str(e)) from e

            with source:
                summary.source_kind = source.kind
                node_files, relationship_files = self._classify(source, session)
                candidates = len(node_files) + len(relationship_files)

                try:
                    tx = self._store.begin_transaction()
                except StoreError as e:
                    raise tracker.fail(f"Graph store unreachable: {e}") from e

                with tx:
                    try:
                        tracker.advance(RunStage.PROCESSING)
                        self._run_passes(tx, session, source, node_files, relationship_files)
                        processed = session.labels_created + session.relationship_types_created
                        if candidates and not processed:
                            raise tracker.fail(
                                f"None of the {candidates} file(s) could be read"
                            )
                        tracker.advance(RunStage.COMMITTING)
                        tx.commit()
                    except BaseException:
                        rollback_quietly(tx)
                        raise

            self._fill_summary(summary, session)
            tracker.advance(RunStage.DONE)
            logger.info(
                "Loaded %d node(s) and %d relationship(s)",
                summary.nodes_created, summary.relationships_created,
            )
            return summary
        except RunFailedError:
            raise
        except (StoreError, ArchiveError, OSError) as e:
            raise tracker.fail(str(e)) from e
        finally:
            clear_context()

    def _classify(
        self, source: BaseArchiveSource, session: ImportSession
    ) -> tuple[list[tuple[str, str]], list[tuple[str, str]]]:
        """Split entries into (entry, label) and (entry, type) lists."""
        node_files: list[tuple[str, str]] = []
        relationship_files: list[tuple[str, str]] = []
        for entry in source.entries():
            classified = self._naming.classify(entry)
            if classified is None or not self._naming.is_valid_category(classified[1]):
                logger.warning("Unrecognized file with name '%s'. Skipped.", entry)
                session.ignored_files += 1
                continue
            kind, category = classified
            if kind is FileKind.NODE:
                node_files.append((entry, category))
            else:
                relationship_files.append((entry, category))
        logger.info(
            "Found %d node file(s) and %d relationship file(s)",
            len(node_files), len(relationship_files),
        )
        return node_files, relationship_files

    def _run_passes(
        self,
        tx: GraphTransaction,
        session: ImportSession,
        source: BaseArchiveSource,
        node_files: list[tuple[str, str]],
        relationship_files: list[tuple[str, str]],
    ) -> None:
        decoder = TabularDecoder(self._settings)
        try:
            for entry, label in node_files:
                set_category_context(label)
                if self._read_file(source, entry, session, decoder.read_node_file, tx, label):
                    session.labels_created += 1

            session.bindings.seal()
            logger.debug("Bound %d transient id(s)", len(session.bindings))

            for entry, rel_type in relationship_files:
                set_category_context(rel_type)
                if self._read_file(
                    source, entry, session, decoder.read_relationship_file, tx, rel_type
                ):
                    session.relationship_types_created += 1
        finally:
            set_category_context(None)

    @staticmethod
    def _read_file(
        source: BaseArchiveSource,
        entry: str,
        session: ImportSession,
        read: Callable[[GraphTransaction, ImportSession, str, TextIO], int],
        tx: GraphTransaction,
        category: str,
    ) -> bool:
        """Feed one entry to *read*; return False if the file was ignored."""
        try:
            with source.open_text(entry) as stream:
                read(tx, session, category, stream)
        except _FILE_ERRORS as e:
            logger.error("File '%s' ignored: %s", entry, e)
            session.ignored_files += 1
            return False
        return True

    @staticmethod
    def _fill_summary(summary: ImportSummary, session: ImportSession) -> None:
        summary.labels_created = session.labels_created
        summary.relationship_types_created = session.relationship_types_created
        summary.ignored_files = session.ignored_files
        summary.nodes_created = session.nodes_created
        summary.relationships_created = session.relationships_created
        summary.relationships_skipped = session.relationships_skipped
        summary.rows_failed = session.rows_failed
