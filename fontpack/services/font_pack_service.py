"""
Font Pack Service — fetch, parse, rewrite, download and archive one font set.

Each build owns a fresh output directory under the temp root and an archive
next to it; ``cleanup`` removes both once the archive has been delivered.
"""

from __future__ import annotations

import logging
import shutil
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from starlette.concurrency import run_in_threadpool

from fontpack.config import settings as fontpack_settings
from fontpack.errors import NoFontsFoundError, UpstreamFetchError
from fontpack.metrics import ARCHIVE_SIZE, observe_build
from fontpack.schemas.fonts import FontFaceDescriptor
from fontpack.services.archiver import create_archive
from fontpack.services.font_fetcher import DownloadReport, download_fonts
from fontpack.services.stylesheet_parser import parse_font_faces
from fontpack.services.stylesheet_rewriter import build_stylesheet, write_stylesheet

logger = logging.getLogger(__name__)


@dataclass
class FontPack:
    archive_path: Path
    output_dir: Path
    descriptors: list[FontFaceDescriptor] = field(default_factory=list)
    report: DownloadReport = field(default_factory=DownloadReport)


def generate_output_path(tmp_dir: str | Path) -> Path:
    """Unique per-request directory: random hex plus a millisecond timestamp."""
    return Path(tmp_dir) / f"{uuid.uuid4().hex}{int(time.time() * 1000)}"


def archive_path_for(output_dir: Path) -> Path:
    return output_dir.with_name(f"{output_dir.name}.zip")


def cleanup(archive_path: Path | None, output_dir: Path) -> None:
    if output_dir.exists():
        shutil.rmtree(output_dir)
    if archive_path is not None:
        archive_path.unlink(missing_ok=True)
    logger.debug("Cleaned up %s", output_dir)


def sweep_stale(tmp_dir: str | Path, max_age_seconds: float, *, now: float | None = None) -> int:
    """Remove entries under ``tmp_dir`` last modified more than ``max_age_seconds`` ago.

    Catches output directories and archives left by a crash or a killed
    worker. Returns the number of entries removed; ``0`` disables the sweep.
    """
    root = Path(tmp_dir)
    if max_age_seconds <= 0 or not root.is_dir():
        return 0
    cutoff = (time.time() if now is None else now) - max_age_seconds
    removed = 0
    for entry in root.iterdir():
        try:
            if entry.stat().st_mtime >= cutoff:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except FileNotFoundError:
            continue
        removed += 1
    if removed:
        logger.info("Swept %d stale entries from %s", removed, root)
    return removed


def build_http_client(**kwargs) -> httpx.AsyncClient:
    headers = {"User-Agent": fontpack_settings.user_agent}
    headers.update(kwargs.pop("headers", {}))
    return httpx.AsyncClient(
        headers=headers,
        timeout=fontpack_settings.http_timeout,
        follow_redirects=True,
        **kwargs,
    )


class FontPackService:
    def __init__(self, client: httpx.AsyncClient, *, concurrency: int = 1):
        self.client = client
        self.concurrency = concurrency

    async def fetch_stylesheet(self, url: str) -> str:
        try:
            response = await self.client.get(url, headers={"Accept": "text/css,*/*;q=0.1"})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Stylesheet fetch from %s returned HTTP %s", url, exc.response.status_code)
            raise UpstreamFetchError(
                f"The font provider answered with HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Stylesheet fetch from %s failed: %s", url, exc)
            raise UpstreamFetchError() from exc
        return response.text

    async def build(self, url: str, output_dir: Path) -> FontPack:
        """Produce the archive for ``url`` inside ``output_dir``.

        Raises ``UpstreamFetchError`` or ``NoFontsFoundError``; individual font
        failures only show up in the returned report.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        try:
            css = await self.fetch_stylesheet(url)
            descriptors = list(parse_font_faces(css))
            if not descriptors:
                logger.info("No @font-face blocks found at %s", url)
                raise NoFontsFoundError()

            stylesheet = build_stylesheet(descriptors)
            report = await download_fonts(
                descriptors, output_dir, self.client, concurrency=self.concurrency
            )
            write_stylesheet(output_dir, stylesheet)

            archive_path = await run_in_threadpool(
                create_archive, output_dir, archive_path_for(output_dir)
            )
        except Exception:
            observe_build("failed")
            raise

        ARCHIVE_SIZE.observe(archive_path.stat().st_size)
        observe_build("partial" if report.failed else "success")
        logger.info(
            "Built font pack %s: %d faces, %d downloaded, %d failed",
            archive_path.name,
            len(descriptors),
            len(report.downloaded),
            len(report.failed),
        )
        return FontPack(
            archive_path=archive_path,
            output_dir=output_dir,
            descriptors=descriptors,
            report=report,
        )
