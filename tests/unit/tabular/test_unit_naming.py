# tests/unit/tabular/test_unit_naming.py — v1
"""Tests for tabular/naming.py — file name <-> category."""

from __future__ import annotations

import pytest

from tabgraph.config.settings import Settings
from tabgraph.core.models import FileKind
from tabgraph.tabular.naming import TabularNaming


@pytest.fixture
def naming(settings) -> TabularNaming:
    return TabularNaming(settings)


class TestFilename:
    def test_node(self, naming):
        assert naming.node_filename("Person") == "node_Person.csv"

    def test_relationship(self, naming):
        assert naming.relationship_filename("KNOWS") == "relationship_KNOWS.csv"

    def test_custom_tokens(self):
        s = Settings(
            _env_file=None, node_file_prefix="n-", relationship_file_prefix="r-",
            csv_extension=".tsv",
        )
        assert TabularNaming(s).filename(FileKind.NODE, "A") == "n-A.tsv"


class TestClassify:
    def test_node_file(self, naming):
        assert naming.classify("node_Person.csv") == (FileKind.NODE, "Person")

    def test_relationship_file(self, naming):
        assert naming.classify("relationship_R.csv") == (FileKind.RELATIONSHIP, "R")

    def test_tokens_inside_category_are_kept(self, naming):
        assert naming.classify("node_node_.csv.csv") == (FileKind.NODE, "node_.csv")

    def test_archive_directory_is_ignored(self, naming):
        assert naming.classify("export/node_City.csv") == (FileKind.NODE, "City")

    @pytest.mark.parametrize(
        "name", ["readme.txt", "Person.csv", "node_.csv", "node_Person.csv.bak"]
    )
    def test_unrecognised(self, naming, name):
        assert naming.classify(name) is None

    def test_longest_prefix_wins(self):
        s = Settings(_env_file=None, node_file_prefix="n_", relationship_file_prefix="n_rel_")
        naming = TabularNaming(s)
        assert naming.classify("n_rel_KNOWS.csv") == (FileKind.RELATIONSHIP, "KNOWS")
        assert naming.classify("n_Person.csv") == (FileKind.NODE, "Person")


class TestValidCategory:
    @pytest.mark.parametrize("category", ["Person", "Has Space", "Ünïcode", "a.b"])
    def test_valid(self, category):
        assert TabularNaming.is_valid_category(category)

    @pytest.mark.parametrize("category", ["", "a/b", "a\\b", "nul\x00"])
    def test_invalid(self, category):
        assert not TabularNaming.is_valid_category(category)
