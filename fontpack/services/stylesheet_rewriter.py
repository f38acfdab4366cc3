"""
Stylesheet Rewriter — rebuild the ``@font-face`` rules against local files.

Rules are built from the parsed descriptors alone, so the stylesheet may
reference fonts whose download failed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from urllib.parse import quote

import rcssmin

from fontpack.schemas.fonts import FontFaceDescriptor
from fontpack.services.font_fetcher import FONTS_DIRNAME, font_extension, font_file_name

logger = logging.getLogger(__name__)

CSS_DIRNAME = "css"
STYLESHEET_NAME = "fonts.css"

_FORMATS = {
    "ttf": "truetype",
    "otf": "opentype",
    "eot": "embedded-opentype",
}


def font_format(extension: str) -> str:
    ext = extension.lower()
    return _FORMATS.get(ext, ext)


def local_font_url(descriptor: FontFaceDescriptor) -> str:
    # Percent-encoded: the minifier drops whitespace even inside url().
    family = quote(descriptor.family, safe="")
    return f"../{FONTS_DIRNAME}/{family}/{quote(font_file_name(descriptor), safe='')}"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def font_face_rule(descriptor: FontFaceDescriptor) -> str:
    fmt = font_format(font_extension(descriptor.source_url))
    declarations = [
        f"font-family: '{_quote(descriptor.family)}';",
        f"font-style: {descriptor.style};",
        f"font-weight: {descriptor.weight};",
    ]
    if descriptor.display:
        declarations.append(f"font-display: {descriptor.display};")
    declarations.append(f"src: url('{_quote(local_font_url(descriptor))}') format('{fmt}');")
    return "@font-face {" + "".join(declarations) + "}\n"


def build_stylesheet(descriptors: Sequence[FontFaceDescriptor]) -> str:
    css = "".join(font_face_rule(descriptor) for descriptor in descriptors)
    return rcssmin.cssmin(css)


def write_stylesheet(output_dir: Path, css: str) -> Path:
    css_dir = output_dir / CSS_DIRNAME
    css_dir.mkdir(parents=True, exist_ok=True)
    path = css_dir / STYLESHEET_NAME
    path.write_text(css, encoding="utf-8")
    logger.info("Wrote %s (%d bytes)", path, len(css))
    return path
