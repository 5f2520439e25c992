# src/io/exporter.py — v1
"""Save orchestrator: store -> tabular files -> archive.

Stages:
  1. Validate or create the output directory
  2. Walk the category frontier and write one file per node category
  3. Write relationships between exported nodes (when requested)
  4. Pack the files into the archive (unless no archive name is given)
  5. Commit the read transaction

The whole run happens inside one store transaction, rolled back when the
run fails.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from tabgraph.archive.packager import ArchiveError, pack_files
from tabgraph.codec.value_codec import ValueCodec
from tabgraph.config.settings import Settings
from tabgraph.core.models import ExportSummary, RunStage
from tabgraph.core.session import ExportSession
from tabgraph.graph.frontier import FrontierExplorer
from tabgraph.io.run_state import RunFailedError, RunTracker, rollback_quietly
from tabgraph.logging.context import clear_context, set_category_context, set_run_context
from tabgraph.store.base_graph_store import BaseGraphStore, GraphTransaction, StoreError
from tabgraph.tabular.encoder import InvalidCategoryError, NoEntitiesError, TabularEncoder

logger = logging.getLogger(__name__)


class ExportOrchestrator:
    """Export node categories (and their relationships) of a graph store.

    Args:
        store: Graph store to read from.
        settings: Application settings. Loaded from .env if None.
    """

    def __init__(self, store: BaseGraphStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or Settings()

    def save(
        self,
        categories: Sequence[str],
        output_path: str | Path,
        archive_name: str | None = None,
        save_relationships: bool | None = None,
        consider_neighbors: bool | None = None,
        trim_values: bool | None = None,
    ) -> ExportSummary:
        """Run one export.

        Args:
            categories: Node labels to export, in order.
            output_path: Directory receiving the files (created if missing).
            archive_name: Archive file name; None uses the configured default,
                an empty string leaves the loose files without packaging.
            save_relationships: Export relationships between exported nodes.
            consider_neighbors: Also export labels of neighboring nodes.
            trim_values: Trim whitespace around string values.

        Returns:
            ExportSummary of a run that reached DONE.

        Raises:
            RunFailedError: On any unrecoverable condition; nothing is committed.
        """
        settings = self._settings
        if archive_name is None:
            archive_name = settings.default_archive_name
        if save_relationships is None:
            save_relationships = settings.save_relationships
        if consider_neighbors is None:
            consider_neighbors = settings.consider_neighbors
        if trim_values is None:
            trim_values = settings.trim_values

        session = ExportSession.start(categories)
        summary = ExportSummary(run_id=session.run_id)
        tracker = RunTracker(summary, "save")
        set_run_context(session.run_id, "save")
        logger.info(
            "Saving labels %s to %s (relationships=%s, neighbors=%s)",
            list(session.open_categories), output_path, save_relationships, consider_neighbors,
        )

        try:
            tracker.advance(RunStage.VALIDATING_PATH)
            if not session.open_categories:
                raise tracker.fail("No label to export")
            directory = self._prepare_directory(Path(output_path), tracker)

            try:
                tx = self._store.begin_transaction()
            except StoreError as e:
                raise tracker.fail(f"Graph store unreachable: {e}") from e

            encoder = TabularEncoder(
                settings,
                ValueCodec(delimiter=settings.csv_delimiter, trim_values=trim_values),
            )
            with tx:
                try:
                    tracker.advance(RunStage.PROCESSING)
                    self._export_nodes(tx, session, summary, encoder, directory, consider_neighbors)
                    if not summary.node_files:
                        raise tracker.fail("No label could be exported", lines=session.failures)
                    if save_relationships:
                        summary.relationship_files = encoder.write_relationships(
                            tx, session, directory
                        )
                    summary.failures = list(session.failures)

                    if archive_name:
                        tracker.advance(RunStage.PACKAGING)
                        result = pack_files(
                            directory,
                            session.produced_files,
                            settings.archive_filename(archive_name),
                        )
                        summary.archive_path = str(result.archive_path)
                        summary.archive_failures = result.failed
                    else:
                        logger.info("No archive name given, files left in %s", directory)

                    tracker.advance(RunStage.COMMITTING)
                    tx.commit()
                except BaseException:
                    rollback_quietly(tx)
                    raise

            tracker.advance(RunStage.DONE)
            logger.info(
                "Saved %d node(s) and %d relationship(s)",
                summary.nodes_written, summary.relationships_written,
            )
            return summary
        except RunFailedError:
            raise
        except (StoreError, ArchiveError, OSError) as e:
            raise tracker.fail(str(e), lines=session.failures) from e
        finally:
            clear_context()

    @staticmethod
    def _prepare_directory(path: Path, tracker: RunTracker) -> Path:
        directory = path.expanduser()
        if directory.exists() and not directory.is_dir():
            raise tracker.fail(f"Output path is not a directory: {directory}")
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise tracker.fail(f"Cannot create output directory {directory}: {e}") from e
        return directory

    @staticmethod
    def _export_nodes(
        tx: GraphTransaction,
        session: ExportSession,
        summary: ExportSummary,
        encoder: TabularEncoder,
        directory: Path,
        consider_neighbors: bool,
    ) -> None:
        explorer = FrontierExplorer(tx, session, consider_neighbors)
        try:
            for category in explorer:
                set_category_context(category)
                try:
                    encoded = encoder.write_node_category(tx, session, category, directory)
                except NoEntitiesError as e:
                    logger.error("Error trying to save label %s: %s", category, e)
                    session.failures.append(f"Error : No nodes found with label : {category}")
                    continue
                except InvalidCategoryError as e:
                    logger.error("Error trying to save label %s: %s", category, e)
                    session.failures.append(f"Error : Invalid label name : {category}")
                    continue
                if encoded is None:
                    continue
                summary.node_files.append(encoded)
                explorer.discover_from(encoded.entity_ids)
        finally:
            set_category_context(None)

