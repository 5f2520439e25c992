# src/io/run_state.py — v1
"""Run state machine shared by the save and load orchestrators.

INIT -> VALIDATING_PATH -> ... -> COMMITTING -> DONE, with FAILED reachable
from any stage. Only unrecoverable conditions reach FAILED; per-category,
per-file and per-row problems are counted in the summary instead.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from tabgraph.core.models import RunStage
from tabgraph.store.base_graph_store import GraphTransaction, StoreError

logger = logging.getLogger(__name__)


class RunFailedError(Exception):
    """The single user-facing error of a failed save or load.

    Attributes:
        stage: Stage the run was in when it failed.
        lines: Status lines collected before the failure.
    """

    def __init__(self, message: str, stage: RunStage, lines: list[str] | None = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.lines = lines or []


class RunTracker:
    """Move a summary through the run stages and build failures.

    Args:
        summary: ExportSummary or ImportSummary; its ``stage`` is updated.
        operation: "save" or "load", for log messages.
    """

    def __init__(self, summary: BaseModel, operation: str) -> None:
        self._summary = summary
        self._operation = operation

    @property
    def stage(self) -> RunStage:
        return self._summary.stage  # type: ignore[attr-defined]

    def advance(self, stage: RunStage) -> None:
        logger.debug("%s: %s -> %s", self._operation, self.stage.value, stage.value)
        self._summary.stage = stage  # type: ignore[attr-defined]

    def fail(self, message: str, lines: list[str] | None = None) -> RunFailedError:
        """Mark the run FAILED and return the error to raise."""
        failed_at = self.stage
        logger.error("%s failed during %s: %s", self._operation, failed_at.value, message)
        self._summary.stage = RunStage.FAILED  # type: ignore[attr-defined]
        return RunFailedError(message, stage=failed_at, lines=lines)


def rollback_quietly(tx: GraphTransaction) -> None:
    """Roll back without hiding the error that caused the rollback."""
    try:
        tx.rollback()
    except StoreError:
        logger.exception("Rollback failed")
