"""
Build a font pack from the command line without running the web service.

Typical usage (from this repo root):
    python scripts/fetch_font_pack.py \
        "https://fonts.googleapis.com/css2?family=Inter:wght@400;700&display=swap" \
        --output inter.zip
"""

from __future__ import annotations

import argparse
import asyncio
import shutil
import sys
from pathlib import Path

# Allow running the script from any working directory by putting the repo
# root (which contains the `fontpack/` package) on sys.path.
_REPO_ROOT = str(Path(__file__).resolve().parents[1])
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from fontpack.config import settings  # noqa: E402
from fontpack.errors import FontPackError  # noqa: E402
from fontpack.logging import configure_logging  # noqa: E402
from fontpack.services.font_pack_service import (  # noqa: E402
    FontPackService,
    build_http_client,
    cleanup,
    generate_output_path,
)


async def fetch(url: str, output: Path, concurrency: int) -> int:
    output_dir = generate_output_path(settings.tmp_dir)
    archive_path = None
    async with build_http_client() as client:
        try:
            pack = await FontPackService(client, concurrency=concurrency).build(url, output_dir)
            archive_path = pack.archive_path
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(archive_path, output)
        finally:
            cleanup(archive_path, output_dir)

    print(f"Wrote {output}: {len(pack.descriptors)} faces, {len(pack.report.failed)} failed downloads")
    for failure in pack.report.failed:
        print(f"  missing {failure.descriptor.family} {failure.descriptor.style} "
              f"{failure.descriptor.weight}: {failure.reason}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Download a web font stylesheet and its fonts as a zip.")
    parser.add_argument("url", help="Stylesheet URL, e.g. a fonts.googleapis.com/css2 link.")
    parser.add_argument(
        "--output",
        default="fonts.zip",
        help="Archive to write (default: fonts.zip).",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.download_concurrency,
        help="Number of font downloads to run at once.",
    )
    args = parser.parse_args()

    configure_logging()
    try:
        return asyncio.run(fetch(args.url, Path(args.output), max(1, args.concurrency)))
    except FontPackError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
