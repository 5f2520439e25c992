# src/core/session.py — v1
"""Per-run mutable state for save and load.

A session is created by an orchestrator, passed down the call chain and
dropped when the run ends. Nothing here is shared between runs.
"""

from __future__ import annotations

import uuid
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from tabgraph.core.models import StoreId
from tabgraph.graph.binding_table import IdentifierBindingTable


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class ExportSession:
    """State of one export run.

    visited_node_ids maps every node written so far to the category whose
    file holds it; insertion order is the write order.
    """

    run_id: str = field(default_factory=new_run_id)
    visited_node_ids: dict[StoreId, str] = field(default_factory=dict)
    closed_categories: set[str] = field(default_factory=set)
    open_categories: deque[str] = field(default_factory=deque)
    produced_files: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @classmethod
    def start(cls, categories: Iterable[str]) -> ExportSession:
        """Open a session whose frontier holds *categories* in caller order."""
        session = cls()
        for category in categories:
            if category not in session.open_categories:
                session.open_categories.append(category)
        return session

    def mark_visited(self, node_id: StoreId, category: str) -> None:
        self.visited_node_ids.setdefault(node_id, category)

    def is_visited(self, node_id: StoreId) -> bool:
        return node_id in self.visited_node_ids

    def add_file(self, filename: str) -> None:
        if filename not in self.produced_files:
            self.produced_files.append(filename)


@dataclass
class ImportSession:
    """State of one import run."""

    run_id: str = field(default_factory=new_run_id)
    bindings: IdentifierBindingTable = field(default_factory=IdentifierBindingTable)
    labels_created: int = 0
    relationship_types_created: int = 0
    ignored_files: int = 0
    nodes_created: int = 0
    relationships_created: int = 0
    relationships_skipped: int = 0
    rows_failed: int = 0
