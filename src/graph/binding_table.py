# src/graph/binding_table.py — v1
"""Transient id -> store id bindings built while loading node files.

Transient ids are the text found in a node file's index column. They are
only meaningful inside the archive that produced them, so every load starts
from an empty table. Once the node pass is over the table is sealed: the
relationship pass can only read from it.
"""

from __future__ import annotations

from tabgraph.core.models import StoreId


class BindingError(Exception):
    """Raised on an invalid bind (duplicate id or table already sealed)."""


class IdentifierBindingTable:
    """Map transient ids to the ids assigned by the store on creation."""

    def __init__(self) -> None:
        self._bindings: dict[str, StoreId] = {}
        self._sealed = False

    def bind(self, transient_id: str, store_id: StoreId) -> None:
        """Record the store id of a freshly created node.

        Raises:
            BindingError: If the table is sealed or *transient_id* is already bound.
        """
        if self._sealed:
            raise BindingError("Binding table is sealed, node pass is over")
        if transient_id in self._bindings:
            raise BindingError(f"Duplicate transient id {transient_id!r}")
        self._bindings[transient_id] = store_id

    def resolve(self, transient_id: str) -> StoreId | None:
        """Return the store id bound to *transient_id*, or None."""
        return self._bindings.get(transient_id)

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __contains__(self, transient_id: object) -> bool:
        return transient_id in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
