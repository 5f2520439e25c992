# tests/unit/store/test_unit_graph_store_factory.py — v1
"""Tests for store adapters — import error handling and factory."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from tabgraph.config.settings import Settings
from tabgraph.store.base_graph_store import StoreError
from tabgraph.store.graph_store_factory import create_graph_store
from tabgraph.store.memory_store import MemoryGraphStore


class TestNeo4jStore:
    def test_import_error(self):
        mod = sys.modules.get("neo4j")
        sys.modules["neo4j"] = None  # type: ignore[assignment]
        try:
            from tabgraph.store.neo4j_store import Neo4jStore
            with pytest.raises(ImportError, match="neo4j"):
                Neo4jStore()
        finally:
            if mod is not None:
                sys.modules["neo4j"] = mod
            else:
                sys.modules.pop("neo4j", None)


class TestNeo4jTransaction:
    def _tx(self):
        from tabgraph.store.neo4j_store import Neo4jTransaction
        session = MagicMock()
        return Neo4jTransaction(session), session

    def test_create_node_quotes_labels(self):
        tx, session = self._tx()
        record = MagicMock()
        record.data.return_value = {"id": "4:x:1"}
        session.begin_transaction.return_value.run.return_value = [record]

        assert tx.create_node(["Odd`Label"], {"a": 1}) == "4:x:1"
        query = session.begin_transaction.return_value.run.call_args.args[0]
        assert ":`Odd``Label`" in query

    def test_query_failure_wrapped(self):
        tx, session = self._tx()
        session.begin_transaction.return_value.run.side_effect = RuntimeError("boom")
        with pytest.raises(StoreError, match="boom"):
            list(tx.find_nodes("A"))

    def test_missing_endpoint(self):
        tx, session = self._tx()
        session.begin_transaction.return_value.run.return_value = []
        with pytest.raises(StoreError, match="not found"):
            tx.create_relationship("a", "b", "R", {})

    def test_close_releases_session(self):
        tx, session = self._tx()
        tx.close()
        session.begin_transaction.return_value.close.assert_called_once()
        session.close.assert_called_once()

    def test_temporal_values_converted(self):
        from tabgraph.store.neo4j_store import _to_native
        value = MagicMock()
        value.to_native.return_value = "native"
        assert _to_native([value, 3]) == ["native", 3]

    def test_pytz_zone_becomes_zoneinfo(self):
        pytz = pytest.importorskip("pytz")
        from tabgraph.store.neo4j_store import _to_native
        value = MagicMock()
        value.to_native.return_value = pytz.timezone("Europe/Paris").localize(
            datetime(2024, 1, 15, 10, 30)
        )
        native = _to_native(value)
        assert native.tzinfo == ZoneInfo("Europe/Paris")
        assert (native.hour, native.utcoffset()) == (10, timedelta(hours=1))

    def test_fixed_offset_kept(self):
        from tabgraph.store.neo4j_store import _to_native
        value = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert _to_native(value) is value


class TestGraphStoreFactory:
    def test_memory(self):
        s = Settings(_env_file=None, graph_db_type="memory")
        assert isinstance(create_graph_store(s), MemoryGraphStore)

    def test_unsupported_type(self):
        """Settings validation rejects invalid types."""
        with pytest.raises(Exception):
            Settings(_env_file=None, graph_db_type="invalid_db")
