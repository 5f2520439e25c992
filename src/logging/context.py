# src/logging/context.py — v1
"""Contextual logging support: attach run_id, operation and category to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set once per save/load run.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
# Set per category (export) or per file (import).
_category: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "category", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    operation: str | None = None
    category: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        operation=_operation.get(),
        category=_category.get(),
    )


def set_run_context(run_id: str, operation: str) -> None:
    """Set run-level context (called once per save or load)."""
    _run_id.set(run_id)
    _operation.set(operation)


def set_category_context(category: str | None) -> None:
    """Set the category currently being written or read."""
    _category.set(category)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _operation.set(None)
    _category.set(None)
