"""
Download — landing page, font pack download and the informational routes.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlsplit

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from starlette.types import Receive, Scope, Send

from fontpack.config import settings
from fontpack.errors import FontPackError, InvalidSourceUrlError
from fontpack.services.font_pack_service import (
    FontPackService,
    archive_path_for,
    build_http_client,
    cleanup,
    generate_output_path,
)

logger = logging.getLogger(__name__)
router = APIRouter()

ARCHIVE_DOWNLOAD_NAME = "fonts.zip"


class TemporaryFileResponse(FileResponse):
    """Serve a built archive, then remove it and its output directory.

    Removal runs however sending ends, including a client that disconnects
    mid-body.
    """

    def __init__(self, path: Path, output_dir: Path, **kwargs):
        super().__init__(path, **kwargs)
        self.archive_path = Path(path)
        self.output_dir = output_dir

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            cleanup(self.archive_path, self.output_dir)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with build_http_client() as client:
        yield client


def _public_file(name: str) -> Path:
    return Path(settings.public_dir) / name


def _validate_source_url(url: str) -> str:
    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise InvalidSourceUrlError()
    return url


@router.get("/")
def index() -> FileResponse:
    return FileResponse(_public_file("index.html"), media_type="text/html")


@router.get("/download")
async def download(
    url: str = Query(default=""),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> FileResponse:
    source_url = _validate_source_url(url)
    output_dir = generate_output_path(settings.tmp_dir)
    service = FontPackService(client, concurrency=settings.download_concurrency)
    try:
        pack = await service.build(source_url, output_dir)
    except FontPackError:
        cleanup(None, output_dir)
        raise
    except Exception:
        logger.exception("Font pack build for %s failed", source_url)
        cleanup(archive_path_for(output_dir), output_dir)
        raise

    return TemporaryFileResponse(
        pack.archive_path,
        pack.output_dir,
        media_type="application/zip",
        filename=ARCHIVE_DOWNLOAD_NAME,
    )


@router.get("/robots.txt")
def robots() -> FileResponse:
    return FileResponse(_public_file("robots.txt"), media_type="text/plain")


@router.get("/sitemap.xml")
def sitemap() -> FileResponse:
    return FileResponse(_public_file("sitemap.xml"), media_type="text/xml")
