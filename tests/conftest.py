# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides settings without .env, an empty memory store and small seeded
graphs. No external dependencies: the memory store runs in process.
"""

from __future__ import annotations

import csv
from datetime import date
from pathlib import Path

import pytest

from tabgraph.config.settings import Settings
from tabgraph.store.memory_store import MemoryGraphStore


# === FIXTURES: Settings and stores ===


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None, graph_db_type="memory")


@pytest.fixture
def memory_store() -> MemoryGraphStore:
    return MemoryGraphStore()


def _seed_people_and_cities(store: MemoryGraphStore) -> dict[str, int]:
    """Three Person nodes (Carol has no age), two City nodes, LIVES_IN and KNOWS links.

    Returns the store ids by name.
    """
    tx = store.begin_transaction()
    with tx:
        ids = {
            "alice": tx.create_node(["Person"], {"name": "Alice", "age": 34}),
            "bob": tx.create_node(["Person"], {"name": "Bob", "age": 27}),
            "carol": tx.create_node(["Person"], {"name": "Carol"}),
            "paris": tx.create_node(["City"], {"name": "Paris", "population": 2148000}),
            "lyon": tx.create_node(["City"], {"name": "Lyon"}),
        }
        tx.create_relationship(ids["alice"], ids["paris"], "LIVES_IN", {"since": date(2019, 5, 1)})
        tx.create_relationship(ids["bob"], ids["lyon"], "LIVES_IN", {})
        tx.create_relationship(ids["alice"], ids["bob"], "KNOWS", {"weight": 0.5})
        tx.commit()
    return ids


@pytest.fixture
def people_store(memory_store: MemoryGraphStore) -> MemoryGraphStore:
    """Memory store seeded with _seed_people_and_cities."""
    _seed_people_and_cities(memory_store)
    return memory_store


@pytest.fixture
def write_files():
    """Return a helper writing text files (name -> content) into a directory."""

    def _write(directory: Path, files: dict[str, str]) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for name, content in files.items():
            (directory / name).write_text(content, encoding="utf-8")
        return directory

    return _write


@pytest.fixture
def small_field_limit():
    """Lower the csv cell limit so a long cell fails partway through a file."""
    previous = csv.field_size_limit(16)
    yield 16
    csv.field_size_limit(previous)
