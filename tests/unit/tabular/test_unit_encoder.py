# tests/unit/tabular/test_unit_encoder.py — v1
"""Tests for tabular/encoder.py — node and relationship files."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tabgraph.core.models import FileKind
from tabgraph.core.session import ExportSession
from tabgraph.tabular.encoder import (
    InvalidCategoryError,
    NoEntitiesError,
    TabularEncoder,
    close_all,
)


def _lines(path):
    return path.read_text(encoding="utf-8").splitlines()


class TestWriteNodeCategory:
    def test_header_and_rows(self, settings, people_store, tmp_path):
        encoder = TabularEncoder(settings)
        session = ExportSession.start(["Person"])
        with people_store.begin_transaction() as tx:
            encoded = encoder.write_node_category(tx, session, "Person", tmp_path)

        assert encoded.filename == "node_Person.csv"
        assert encoded.kind is FileKind.NODE
        assert encoded.rows == 3
        lines = _lines(tmp_path / "node_Person.csv")
        assert lines[0] == "id;age;name"
        assert lines[1:] == ["0;34;Alice", "1;27;Bob", "2;;Carol"]
        assert session.produced_files == ["node_Person.csv"]
        assert set(session.visited_node_ids) == {0, 1, 2}

    def test_no_entities(self, settings, people_store, tmp_path):
        encoder = TabularEncoder(settings)
        session = ExportSession.start(["Ghost"])
        with people_store.begin_transaction() as tx:
            with pytest.raises(NoEntitiesError, match="Ghost"):
                encoder.write_node_category(tx, session, "Ghost", tmp_path)
        assert not (tmp_path / "node_Ghost.csv").exists()

    def test_invalid_category(self, settings, people_store, tmp_path):
        encoder = TabularEncoder(settings)
        with people_store.begin_transaction() as tx:
            with pytest.raises(InvalidCategoryError):
                encoder.write_node_category(tx, ExportSession(), "../escape", tmp_path)

    def test_multi_label_node_written_once(self, settings, memory_store, tmp_path):
        with memory_store.begin_transaction() as tx:
            tx.create_node(["A", "B"], {"k": 1})
            tx.create_node(["B"], {"k": 2})
            tx.commit()

        encoder = TabularEncoder(settings)
        session = ExportSession.start(["A", "B"])
        with memory_store.begin_transaction() as tx:
            a = encoder.write_node_category(tx, session, "A", tmp_path)
            b = encoder.write_node_category(tx, session, "B", tmp_path)

        assert a.rows == 1
        assert b.rows == 1
        assert session.visited_node_ids == {0: "A", 1: "B"}

    def test_all_nodes_already_written(self, settings, memory_store, tmp_path):
        with memory_store.begin_transaction() as tx:
            tx.create_node(["A", "B"], {})
            tx.commit()

        encoder = TabularEncoder(settings)
        session = ExportSession.start(["A", "B"])
        with memory_store.begin_transaction() as tx:
            encoder.write_node_category(tx, session, "A", tmp_path)
            assert encoder.write_node_category(tx, session, "B", tmp_path) is None
        assert not (tmp_path / "node_B.csv").exists()

    def test_value_with_delimiter_is_quoted(self, settings, memory_store, tmp_path):
        with memory_store.begin_transaction() as tx:
            tx.create_node(["Note"], {"text": "a;b", "flag": True})
            tx.commit()

        encoder = TabularEncoder(settings)
        with memory_store.begin_transaction() as tx:
            encoder.write_node_category(tx, ExportSession(), "Note", tmp_path)
        assert _lines(tmp_path / "node_Note.csv") == ["id;flag;text", '0;true;"a;b"']

    def test_existing_file_overwritten(self, settings, people_store, tmp_path):
        (tmp_path / "node_Person.csv").write_text("stale\n" * 10, encoding="utf-8")
        encoder = TabularEncoder(settings)
        with people_store.begin_transaction() as tx:
            encoder.write_node_category(tx, ExportSession(), "Person", tmp_path)
        assert len(_lines(tmp_path / "node_Person.csv")) == 4


class TestWriteRelationships:
    def _export_people(self, settings, store, tmp_path, categories):
        encoder = TabularEncoder(settings)
        session = ExportSession.start(categories)
        tx = store.begin_transaction()
        for category in categories:
            encoder.write_node_category(tx, session, category, tmp_path)
        return encoder, session, tx

    def test_only_between_exported_nodes(self, settings, people_store, tmp_path):
        encoder, session, tx = self._export_people(settings, people_store, tmp_path, ["Person"])
        with tx:
            files = encoder.write_relationships(tx, session, tmp_path)

        assert [f.filename for f in files] == ["relationship_KNOWS.csv"]
        assert _lines(tmp_path / "relationship_KNOWS.csv") == [
            "source;destination;weight",
            "0;1;0.5",
        ]
        assert not (tmp_path / "relationship_LIVES_IN.csv").exists()

    def test_one_file_per_type(self, settings, people_store, tmp_path):
        encoder, session, tx = self._export_people(
            settings, people_store, tmp_path, ["Person", "City"]
        )
        with tx:
            files = encoder.write_relationships(tx, session, tmp_path)

        by_type = {f.category: f for f in files}
        assert set(by_type) == {"KNOWS", "LIVES_IN"}
        assert by_type["LIVES_IN"].rows == 2
        assert _lines(tmp_path / "relationship_LIVES_IN.csv") == [
            "source;destination;since",
            "0;3;2019-05-01",
            "1;4;",
        ]
        assert session.produced_files[-2:] == [
            "relationship_LIVES_IN.csv", "relationship_KNOWS.csv",
        ]

    def test_invalid_type_reported(self, settings, memory_store, tmp_path):
        with memory_store.begin_transaction() as tx:
            a = tx.create_node(["A"], {})
            tx.create_relationship(a, a, "BAD/TYPE", {})
            tx.commit()

        encoder, session, tx = self._export_people(settings, memory_store, tmp_path, ["A"])
        with tx:
            files = encoder.write_relationships(tx, session, tmp_path)
        assert files == []
        assert session.failures == ["Error : Invalid relationship type : BAD/TYPE"]


class TestCloseAll:
    def test_collects_failures_and_closes_others(self):
        bad = MagicMock()
        bad.close.side_effect = OSError("disk gone")
        good = MagicMock()
        failed = close_all({"bad": bad, "good": good})
        assert failed == ["bad"]
        good.close.assert_called_once()
