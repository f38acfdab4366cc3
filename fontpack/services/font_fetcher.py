"""
Font Fetcher — download each descriptor's font binary into ``fonts/<family>/``.

A failed download is logged and recorded; it never aborts the batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

import httpx

from fontpack.metrics import observe_download
from fontpack.schemas.fonts import FontFaceDescriptor

logger = logging.getLogger(__name__)

FONTS_DIRNAME = "fonts"


@dataclass
class DownloadFailure:
    descriptor: FontFaceDescriptor
    reason: str


@dataclass
class DownloadReport:
    downloaded: list[Path] = field(default_factory=list)
    failed: list[DownloadFailure] = field(default_factory=list)


def font_extension(source_url: str) -> str:
    """Text after the last ``.`` of the URL's last path segment, or ``""``."""
    segment = urlsplit(source_url).path.rsplit("/", 1)[-1]
    stem, dot, ext = segment.rpartition(".")
    if not dot or not stem:
        return ""
    return ext


def font_file_name(descriptor: FontFaceDescriptor) -> str:
    family = descriptor.family.replace(" ", "")
    name = f"{family}-{descriptor.style}-{descriptor.weight}"
    ext = font_extension(descriptor.source_url)
    if ext:
        name = f"{name}.{ext}"
    return name.replace(";", "")


def font_path(output_dir: Path, descriptor: FontFaceDescriptor) -> Path:
    """Destination of a descriptor's binary; refuses families that escape ``output_dir/fonts``."""
    fonts_root = (output_dir / FONTS_DIRNAME).resolve()
    family_dir = (fonts_root / descriptor.family).resolve()
    if family_dir != fonts_root and fonts_root not in family_dir.parents:
        raise ValueError(f"Font family {descriptor.family!r} resolves outside the output directory")
    return family_dir / font_file_name(descriptor)


async def _stream_to_file(client: httpx.AsyncClient, url: str, destination: Path) -> None:
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        with open(destination, "wb") as fh:
            async for chunk in response.aiter_bytes():
                fh.write(chunk)


async def download_font(
    client: httpx.AsyncClient, descriptor: FontFaceDescriptor, output_dir: Path
) -> Path:
    """Download one font and return the written path; a partial file is removed on HTTP errors."""
    destination = font_path(output_dir, descriptor)
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        await _stream_to_file(client, descriptor.source_url, destination)
    except (httpx.HTTPError, httpx.InvalidURL):
        destination.unlink(missing_ok=True)
        raise
    return destination


async def download_fonts(
    descriptors: Sequence[FontFaceDescriptor],
    output_dir: Path,
    client: httpx.AsyncClient,
    *,
    concurrency: int = 1,
) -> DownloadReport:
    """Download every descriptor's font.

    With ``concurrency=1`` downloads run one at a time in descriptor order.
    Larger values use a bounded pool; descriptors that map to the same file
    still download one after another, so the last one wins either way.
    """
    report = DownloadReport()
    slots = asyncio.Semaphore(max(1, concurrency))
    path_locks: dict[str, asyncio.Lock] = {}
    results: list[Path | DownloadFailure] = [DownloadFailure(d, "not attempted") for d in descriptors]

    async def _run(index: int, descriptor: FontFaceDescriptor) -> None:
        file_name = font_file_name(descriptor)
        if not descriptor.source_url:
            logger.warning("Skipping %s: no source URL", file_name)
            results[index] = DownloadFailure(descriptor, "missing source URL")
            return
        try:
            lock_key = str(font_path(output_dir, descriptor))
        except ValueError as exc:
            logger.warning("Skipping %s: %s", file_name, exc)
            results[index] = DownloadFailure(descriptor, str(exc))
            return
        lock = path_locks.setdefault(lock_key, asyncio.Lock())
        async with lock, slots:
            try:
                results[index] = await download_font(client, descriptor, output_dir)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning("Failed to download %s from %s: %s", file_name, descriptor.source_url, exc)
                results[index] = DownloadFailure(descriptor, str(exc) or exc.__class__.__name__)

    logger.info("Downloading %d fonts into %s", len(descriptors), output_dir)
    if concurrency <= 1:
        for index, descriptor in enumerate(descriptors):
            await _run(index, descriptor)
    else:
        await asyncio.gather(*(_run(i, d) for i, d in enumerate(descriptors)))

    for result in results:
        if isinstance(result, DownloadFailure):
            observe_download("failed")
            report.failed.append(result)
        else:
            observe_download("success")
            report.downloaded.append(result)
    return report
