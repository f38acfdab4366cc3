"""
Archiver — zip an output tree under a single top-level ``fonts`` folder.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)

ARCHIVE_ROOT = "fonts"
COMPRESSION_LEVEL = 9


def create_archive(directory: Path, archive_path: Path, root_name: str = ARCHIVE_ROOT) -> Path:
    """Write every file below ``directory`` into ``archive_path``.

    Entries are stored as ``<root_name>/<path relative to directory>``. The
    archive is closed before returning, so the path is immediately usable.
    """
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(
        archive_path,
        "w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=COMPRESSION_LEVEL,
    ) as zf:
        for path in sorted(directory.rglob("*")):
            # Directories are written too so empty family folders survive.
            zf.write(path, f"{root_name}/{path.relative_to(directory).as_posix()}")
    logger.info("Archive %s finalized: %d total bytes", archive_path, archive_path.stat().st_size)
    return archive_path
