# src/tabular/naming.py — v1
"""File naming convention: ``<prefix><category><extension>``.

The category of a file is recovered by removing the prefix from the start
and the extension from the end of its base name, nothing else, so a
category may itself contain the tokens.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from tabgraph.config.settings import Settings
from tabgraph.core.models import FileKind

_FORBIDDEN_CHARS = ("/", "\\", "\x00")


class TabularNaming:
    """Build and parse tabular file names for one configuration."""

    def __init__(self, settings: Settings) -> None:
        self._extension = settings.csv_extension
        self._prefixes = {
            FileKind.NODE: settings.node_file_prefix,
            FileKind.RELATIONSHIP: settings.relationship_file_prefix,
        }

    def filename(self, kind: FileKind, category: str) -> str:
        return f"{self._prefixes[kind]}{category}{self._extension}"

    def node_filename(self, label: str) -> str:
        return self.filename(FileKind.NODE, label)

    def relationship_filename(self, rel_type: str) -> str:
        return self.filename(FileKind.RELATIONSHIP, rel_type)

    def classify(self, name: str) -> tuple[FileKind, str] | None:
        """Return (kind, category) for a file or archive entry name.

        Directory parts of archive entries are ignored. Returns None for an
        unrecognised name. When one prefix starts with the other, the longer
        one wins.
        """
        base = PurePosixPath(name.replace("\\", "/")).name
        if not base.endswith(self._extension):
            return None
        stem = base[: len(base) - len(self._extension)]
        by_length = sorted(self._prefixes.items(), key=lambda kv: len(kv[1]), reverse=True)
        for kind, prefix in by_length:
            if stem.startswith(prefix) and len(stem) > len(prefix):
                return kind, stem[len(prefix):]
        return None

    @staticmethod
    def is_valid_category(category: str) -> bool:
        """A category must be usable as part of a single file name."""
        return bool(category) and not any(c in category for c in _FORBIDDEN_CHARS)
