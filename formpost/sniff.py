"""
Best-effort content type detection for uploaded files.

The filename extension wins when it names a known image format; otherwise the
first bytes of the stream are matched against known magic numbers, and
samples with no binary signature are classified as markup or plain text.
"""

from __future__ import annotations

import logging
import os
from typing import BinaryIO, Final

import filetype

from formpost.models import source_name
from formpost.utils import base_filename

logger = logging.getLogger(__name__)

SNIFF_LENGTH: Final[int] = 512
DEFAULT_CONTENT_TYPE: Final[str] = "application/octet-stream"
TEXT_CONTENT_TYPE: Final[str] = "text/plain; charset=utf-8"

_TEXT_BOMS: Final[tuple[tuple[bytes, str], ...]] = (
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_CONTENT_TYPE),
)
_WHITESPACE = b"\t\n\x0c\r "
_HTML_TAGS: Final[tuple[bytes, ...]] = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
)
# Control bytes that never appear in text; tab, LF, FF, CR and ESC are allowed.
_BINARY_BYTES = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)

IMAGE_EXTENSIONS: Final[dict[str, str]] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
}

# Formats that magic-byte matching tends to miss.
FALLBACK_EXTENSIONS: Final[dict[str, str]] = {
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
}


def extension_of(filename: str) -> str:
    """Return the lowercased extension of the last path segment, dot included."""
    return os.path.splitext(base_filename(filename))[1].lower()


def _sniff_text(head: bytes) -> str | None:
    """
    Classify markup and plain text the way browsers do (WHATWG MIME
    sniffing): byte order marks first, then HTML/XML signatures after
    leading whitespace, then any sample free of binary control bytes.
    """
    for bom, content_type in _TEXT_BOMS:
        if head.startswith(bom):
            return content_type

    stripped = head.lstrip(_WHITESPACE)
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    upper = stripped[:16].upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and upper[len(tag):len(tag) + 1] in (b" ", b">"):
            return "text/html; charset=utf-8"

    if any(byte in _BINARY_BYTES for byte in head):
        return None
    return TEXT_CONTENT_TYPE


def sniff_bytes(head: bytes) -> str:
    """Classify a leading byte sample, falling back to octet-stream."""
    if not head:
        return DEFAULT_CONTENT_TYPE
    kind = filetype.guess(head)
    if kind is not None and kind.mime:
        return kind.mime
    return _sniff_text(head) or DEFAULT_CONTENT_TYPE


def detect_content_type(stream: BinaryIO, filename: str | None = None) -> str:
    """
    Detect the MIME type of a seekable binary stream.

    Args:
        stream: Seekable stream; its position is restored before returning.
        filename: Name used for the extension lookup. Defaults to the
            stream's own ``name``.

    Returns:
        A non-empty MIME type string.

    Raises:
        OSError: If reading from or repositioning the stream fails.
    """
    if filename is None:
        filename = source_name(stream)
    ext = extension_of(filename)
    if ext in IMAGE_EXTENSIONS:
        return IMAGE_EXTENSIONS[ext]

    position = stream.tell()
    try:
        head = stream.read(SNIFF_LENGTH)
    finally:
        stream.seek(position)

    content_type = sniff_bytes(head)
    if content_type == DEFAULT_CONTENT_TYPE and ext:
        content_type = FALLBACK_EXTENSIONS.get(ext, content_type)
    logger.debug("Sniffed %s for %r", content_type, filename)
    return content_type
