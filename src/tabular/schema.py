# src/tabular/schema.py — v1
"""Header union over the heterogeneous property sets of one category."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)


class SchemaAggregator:
    """Accumulate property keys and expose them as a sorted header.

    Keys listed in *reserved* (index/source/destination column names) are
    never part of the header; a property using one of those names cannot be
    written and is reported once.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._reserved = frozenset(reserved)
        self._keys: set[str] = set()
        self._dropped: set[str] = set()

    def add(self, properties: Mapping[str, Any]) -> None:
        for key in properties:
            if key in self._reserved:
                if key not in self._dropped:
                    logger.warning(
                        "Property %r collides with a reserved column and is not exported",
                        key,
                    )
                    self._dropped.add(key)
                continue
            self._keys.add(key)

    def add_all(self, entities: Iterable[Mapping[str, Any]]) -> SchemaAggregator:
        for properties in entities:
            self.add(properties)
        return self

    @property
    def header(self) -> list[str]:
        """Lexicographically sorted property keys."""
        return sorted(self._keys)


def header_union(
    entities: Iterable[Mapping[str, Any]], reserved: Iterable[str] = ()
) -> list[str]:
    """Sorted union of property keys over *entities*."""
    return SchemaAggregator(reserved).add_all(entities).header
