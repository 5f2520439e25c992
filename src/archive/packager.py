# src/archive/packager.py — v1
"""Bundle the files of an export into one zip archive.

Each file becomes one entry named after it; once its entry is written the
loose file is deleted. A file that cannot be added is logged and left on
disk, the others are still packed.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Raised when an archive cannot be created, opened or read."""


class PackResult(BaseModel):
    """Outcome of a pack operation."""

    archive_path: Path
    packed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


def pack_files(directory: Path, filenames: Iterable[str], archive_name: str) -> PackResult:
    """Write *filenames* (relative to *directory*) into ``directory/archive_name``.

    Args:
        directory: Folder holding the loose files; the archive is created there.
        filenames: Files to pack, in entry order.
        archive_name: Archive file name, extension included.

    Returns:
        PackResult listing packed and failed entries.

    Raises:
        ArchiveError: If the archive itself cannot be opened or finalised.
    """
    archive_path = directory / archive_name
    if archive_path.exists():
        logger.warning("Overwriting existing archive %s", archive_path)
    result = PackResult(archive_path=archive_path)
    logger.info("Creating archive %s", archive_path)

    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for filename in filenames:
                try:
                    zf.write(directory / filename, arcname=filename)
                except (OSError, ValueError):
                    logger.exception("Could not add %s to archive", filename)
                    result.failed.append(filename)
                    continue
                result.packed.append(filename)
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveError(f"Cannot create archive {archive_path}: {e}") from e

    for filename in result.packed:
        try:
            (directory / filename).unlink()
        except OSError:
            logger.exception("Could not delete packed file %s", filename)

    return result
