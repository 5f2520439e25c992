# src/archive/sources.py — v1
"""Read tabular files from a zip archive or from a plain directory.

Both sources list entry names and open one text stream per entry. Streams
are opened lazily, one at a time, by the import passes.
"""

from __future__ import annotations

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType
from typing import Literal, TextIO

from tabgraph.archive.packager import ArchiveError

logger = logging.getLogger(__name__)

# utf-8-sig drops the byte-order mark spreadsheet tools prepend.
_ENCODING = "utf-8-sig"


class BaseArchiveSource(ABC):
    """A set of named tabular files."""

    @property
    @abstractmethod
    def kind(self) -> Literal["archive", "directory"]:
        """Source kind, reported in the import summary."""

    @abstractmethod
    def entries(self) -> list[str]:
        """Names of the regular files in the source."""

    @abstractmethod
    def open_text(self, name: str) -> TextIO:
        """Open one entry as a text stream. The caller closes it."""

    def close(self) -> None:
        """Release the underlying container."""

    def __enter__(self) -> BaseArchiveSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ZipArchiveSource(BaseArchiveSource):
    """Entries of a zip archive."""

    def __init__(self, path: Path) -> None:
        try:
            self._zip = zipfile.ZipFile(path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Cannot open archive {path}: {e}") from e
        self._path = path

    @property
    def kind(self) -> Literal["archive", "directory"]:
        return "archive"

    def entries(self) -> list[str]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def open_text(self, name: str) -> TextIO:
        return io.TextIOWrapper(self._zip.open(name), encoding=_ENCODING, newline="")

    def close(self) -> None:
        self._zip.close()


class DirectoryArchiveSource(BaseArchiveSource):
    """Regular files directly inside a directory (not recursive)."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def kind(self) -> Literal["archive", "directory"]:
        return "directory"

    def entries(self) -> list[str]:
        return sorted(p.name for p in self._path.iterdir() if p.is_file())

    def open_text(self, name: str) -> TextIO:
        return (self._path / name).open("r", encoding=_ENCODING, newline="")


def open_archive_source(path: Path) -> BaseArchiveSource:
    """Open *path* as a directory source or a zip archive source.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ArchiveError: If *path* is a file but not a readable zip archive.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file or folder not found at: {path}")
    if path.is_dir():
        return DirectoryArchiveSource(path)
    return ZipArchiveSource(path)
