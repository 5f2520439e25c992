# src/core/models.py — v1
"""Shared Pydantic models used across modules.

Store entities are snapshots: changing a record never changes the store.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

# Memory store ids are ints, Neo4j element ids are strings.
StoreId = Union[int, str]


# === STORE ENTITIES ===


class NodeRecord(BaseModel):
    """A node as observed in the store."""

    id: StoreId
    labels: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)


class RelationshipRecord(BaseModel):
    """A relationship as observed in the store."""

    id: StoreId
    type: str
    source_id: StoreId
    destination_id: StoreId
    properties: dict[str, Any] = Field(default_factory=dict)

    def other_end(self, node_id: StoreId) -> StoreId:
        """Return the endpoint that is not *node_id* (itself for a self-loop)."""
        return self.destination_id if self.source_id == node_id else self.source_id


# === FILES ===


class FileKind(str, Enum):
    """What a tabular file holds."""

    NODE = "node"
    RELATIONSHIP = "relationship"


class EncodedFile(BaseModel):
    """One tabular file written during an export."""

    filename: str
    category: str
    kind: FileKind
    header: list[str]
    rows: int = 0
    # Store ids of the written entities, used for neighbor discovery.
    entity_ids: list[StoreId] = Field(default_factory=list, exclude=True)


# === RUNS ===


class RunStage(str, Enum):
    """Orchestrator state machine."""

    INIT = "init"
    VALIDATING_PATH = "validating_path"
    PROCESSING = "processing"
    PACKAGING = "packaging"
    UNPACKING = "unpacking"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


class ExportSummary(BaseModel):
    """Outcome of one save run."""

    run_id: str
    stage: RunStage = RunStage.INIT
    node_files: list[EncodedFile] = Field(default_factory=list)
    relationship_files: list[EncodedFile] = Field(default_factory=list)
    failures: list[str] = Field(default_factory=list)
    archive_path: str | None = None
    archive_failures: list[str] = Field(default_factory=list)

    @property
    def nodes_written(self) -> int:
        return sum(f.rows for f in self.node_files)

    @property
    def relationships_written(self) -> int:
        return sum(f.rows for f in self.relationship_files)

    def lines(self) -> list[str]:
        """Human-readable status lines, failures first."""
        lines = list(self.failures)
        lines.extend(
            f"Error : Could not add file to archive : {name}"
            for name in self.archive_failures
        )
        lines.append(
            f"{len(self.node_files)} node file(s) written with {self.nodes_written} node(s)."
        )
        lines.append(
            f"{len(self.relationship_files)} relationship file(s) written with "
            f"{self.relationships_written} relationship(s)."
        )
        if self.archive_path:
            lines.append(f"Archive created at {self.archive_path}")
        lines.append("Saving done")
        return lines


class ImportSummary(BaseModel):
    """Outcome of one load run."""

    run_id: str
    stage: RunStage = RunStage.INIT
    source_kind: Literal["archive", "directory"] | None = None
    labels_created: int = 0
    relationship_types_created: int = 0
    ignored_files: int = 0
    nodes_created: int = 0
    relationships_created: int = 0
    relationships_skipped: int = 0
    rows_failed: int = 0

    def lines(self) -> list[str]:
        """Human-readable status lines."""
        return [
            f"{self.labels_created} file(s) containing a label were found and processed.",
            f"{self.relationship_types_created} file(s) containing relationships "
            "were found and processed.",
            f"{self.ignored_files} file(s) were ignored. Check logs for more information.",
            f"{self.nodes_created} node(s) and {self.relationships_created} "
            "relationship(s) were created during the import.",
            f"{self.relationships_skipped} relationship(s) skipped because an "
            "endpoint was not found.",
            f"{self.rows_failed} row(s) could not be created. Check logs for more information.",
        ]
