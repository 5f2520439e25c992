# src/api/facade.py — v1
"""Public API facade: save a graph to tabular files, load it back.

Usage:
    from tabgraph.api.facade import save, load
    lines = save(store, ["Person"], "/tmp/out")
    lines = load(store, "/tmp/out/export.zip")

Both return human-readable status lines. A fatal condition is raised as
RunFailedError, whose ``lines`` attribute holds the messages collected
before the failure.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from tabgraph.config.settings import Settings
from tabgraph.io.exporter import ExportOrchestrator
from tabgraph.io.importer import ImportOrchestrator
from tabgraph.store.base_graph_store import BaseGraphStore

logger = logging.getLogger(__name__)


def save(
    store: BaseGraphStore,
    categories: Sequence[str],
    output_path: str | Path,
    archive_name: str | None = None,
    save_relationships: bool | None = None,
    consider_neighbors: bool | None = None,
    trim_values: bool | None = None,
    settings: Settings | None = None,
) -> list[str]:
    """Export node categories of *store* into *output_path*.

    Options left as None take their value from *settings*.

    Args:
        store: Graph store to read from.
        categories: Node labels to export.
        output_path: Output directory, created if missing.
        archive_name: Zip archive name. An empty string skips packaging.
        save_relationships: Export relationships between exported nodes.
        consider_neighbors: Also export the labels of neighboring nodes.
        trim_values: Trim whitespace around string values.
        settings: Global settings. Loaded from .env if None.

    Returns:
        Status lines, failures first.

    Raises:
        RunFailedError: If the export could not complete.
    """
    summary = ExportOrchestrator(store, settings).save(
        categories,
        output_path,
        archive_name=archive_name,
        save_relationships=save_relationships,
        consider_neighbors=consider_neighbors,
        trim_values=trim_values,
    )
    return summary.lines()


def load(
    store: BaseGraphStore,
    path: str | Path,
    settings: Settings | None = None,
) -> list[str]:
    """Import a zip archive or a directory of tabular files into *store*.

    Raises:
        RunFailedError: If the import could not complete.
    """
    return ImportOrchestrator(store, settings).load(path).lines()
