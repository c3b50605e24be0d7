"""
multipart/form-data encoding.

``MultipartWriter`` handles boundaries and part framing; ``FormBuilder`` sits
on top of it and turns files, readers and plain values into parts, streaming
content straight into the output sink.
"""

from __future__ import annotations

import io
import logging
import shutil
import string
import uuid
from collections.abc import Iterable
from types import TracebackType
from typing import BinaryIO, Final

from formpost.errors import BoundaryError, FormClosedError, InvalidFieldError
from formpost.headers import part_headers
from formpost.models import source_content_type, source_name
from formpost.sniff import DEFAULT_CONTENT_TYPE, detect_content_type
from formpost.utils import base_filename

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE: Final[int] = 32 * 1024
MAX_BOUNDARY_LENGTH: Final[int] = 70

_BOUNDARY_CHARS = frozenset(string.ascii_letters + string.digits + "'()+_,-./:=? ")
# Characters that force the boundary parameter to be quoted in Content-Type.
_TSPECIALS = frozenset('()<>@,;:\\"/[]?= ')


def _validate_boundary(boundary: str) -> str:
    if not 1 <= len(boundary) <= MAX_BOUNDARY_LENGTH:
        raise BoundaryError(
            f"Boundary must be 1-{MAX_BOUNDARY_LENGTH} characters, got {len(boundary)}"
        )
    if boundary.endswith(" "):
        raise BoundaryError("Boundary must not end with a space")
    bad = set(boundary) - _BOUNDARY_CHARS
    if bad:
        raise BoundaryError(f"Invalid boundary characters: {''.join(sorted(bad))!r}")
    return boundary


class MultipartWriter:
    """
    Low-level multipart framing over a binary sink.

    Parts are delimited as ``--boundary`` lines; the CRLF preceding each
    delimiter after the first belongs to the delimiter, so part content is
    written verbatim.
    """

    def __init__(self, body: BinaryIO, boundary: str | None = None) -> None:
        self._body = body
        self._boundary = (
            uuid.uuid4().hex if boundary is None else _validate_boundary(boundary)
        )
        self._parts = 0
        self.closed = False

    @property
    def boundary(self) -> str:
        return self._boundary

    def _check_open(self) -> None:
        if self.closed:
            raise FormClosedError("Multipart body is already closed")

    def _delimiter(self, suffix: str) -> str:
        prefix = "\r\n" if self._parts else ""
        return f"{prefix}--{self._boundary}{suffix}\r\n"

    def create_part(self, headers: Iterable[tuple[str, str]]) -> BinaryIO:
        """
        Start a new part and return the sink its content should be written to.
        """
        self._check_open()
        lines = [self._delimiter("")]
        lines.extend(f"{name}: {value}\r\n" for name, value in headers)
        lines.append("\r\n")
        self._body.write("".join(lines).encode("utf-8"))
        self._parts += 1
        return self._body

    def write_field(self, name: str, value: bytes) -> None:
        self.create_part(part_headers(name)).write(value)

    def close(self) -> None:
        self._check_open()
        self._body.write(self._delimiter("--").encode("ascii"))
        self.closed = True

    def form_data_content_type(self) -> str:
        boundary = self._boundary
        if any(ch in _TSPECIALS for ch in boundary):
            boundary = f'"{boundary}"'
        return f"multipart/form-data; boundary={boundary}"


class FormBuilder:
    """
    Streaming multipart/form-data body builder.

    The builder never closes or takes ownership of the handles passed to it;
    callers release them once the body has been consumed.

    Args:
        body: Writable binary sink receiving the encoded body.
        boundary: Explicit boundary; a random one is generated when omitted.
        chunk_size: Buffer size used when copying part content.
    """

    def __init__(
        self,
        body: BinaryIO,
        boundary: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.writer = MultipartWriter(body, boundary)
        self.chunk_size = chunk_size

    def __enter__(self) -> FormBuilder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # A failed part leaves the body invalid; don't terminate it.
        if exc_type is None and not self.closed:
            self.close()

    @property
    def boundary(self) -> str:
        return self.writer.boundary

    @property
    def content_type(self) -> str:
        """Value for the request's ``Content-Type`` header."""
        return self.writer.form_data_content_type()

    @property
    def closed(self) -> bool:
        return self.writer.closed

    def _prepare(self, field_name: str) -> None:
        if self.closed:
            raise FormClosedError("Multipart body is already closed")
        if not field_name:
            raise InvalidFieldError("fieldname cannot be empty")

    def _write_part(
        self,
        field_name: str,
        source: BinaryIO,
        filename: str,
        content_type: str | None,
    ) -> None:
        part = self.writer.create_part(part_headers(field_name, filename, content_type))
        logger.debug(
            "Writing part %r (filename=%r, content_type=%r)",
            field_name,
            base_filename(filename),
            content_type,
        )
        shutil.copyfileobj(source, part, self.chunk_size)

    def add_file(self, field_name: str, file: BinaryIO) -> None:
        """
        Add a file part named after ``file.name``.

        The part carries the generic ``application/octet-stream`` type; use
        :meth:`add_file_with_detected_type` to sniff a more specific one.
        Content is copied from the handle's current position.
        """
        self._prepare(field_name)
        filename = base_filename(source_name(file))
        if not filename:
            raise InvalidFieldError("filename cannot be empty")
        self._write_part(field_name, file, filename, DEFAULT_CONTENT_TYPE)

    def add_file_reader(
        self,
        field_name: str,
        reader: BinaryIO | bytes | bytearray,
        filename: str = "",
        content_type: str | None = None,
    ) -> None:
        """
        Add a file part from any readable source.

        Args:
            field_name: Form field name.
            reader: Object with ``read(size)``, consumed in a single forward
                pass. ``bytes`` are wrapped in an in-memory stream.
            filename: Filename for the part. When empty, the reader's own
                ``name`` is used if it has one; otherwise it stays empty.
            content_type: Explicit part type. When omitted, the reader's
                ``content_type`` attribute is used if it has one, and no
                ``Content-Type`` header is written otherwise.
        """
        self._prepare(field_name)
        if isinstance(reader, (bytes, bytearray)):
            reader = io.BytesIO(reader)
        if not filename:
            filename = source_name(reader)
        if content_type is None:
            content_type = source_content_type(reader) or None
        self._write_part(field_name, reader, filename, content_type)

    def add_file_with_detected_type(self, field_name: str, file: BinaryIO | None) -> None:
        """
        Add a file part whose ``Content-Type`` is sniffed from the file.

        The handle is rewound to its start for detection and again before
        copying, so the whole file is always sent.

        Raises:
            InvalidFieldError: If ``file`` is None or has no usable name.
            OSError: If seeking or reading the file fails.
        """
        self._prepare(field_name)
        if file is None:
            raise InvalidFieldError("file cannot be None")
        filename = base_filename(source_name(file))
        if not filename:
            raise InvalidFieldError("cannot get filename from file")

        file.seek(0)
        content_type = detect_content_type(file, filename)
        file.seek(0)
        self._write_part(field_name, file, filename, content_type)

    def add_field(self, field_name: str, value: str | bytes) -> None:
        """Add a plain value part with no filename or content type."""
        self._prepare(field_name)
        if isinstance(value, str):
            value = value.encode("utf-8")
        logger.debug("Writing field %r (%d bytes)", field_name, len(value))
        self.writer.write_field(field_name, value)

    def close(self) -> None:
        """Write the closing boundary. Must be called exactly once."""
        self.writer.close()
        logger.debug("Closed multipart body with boundary %s", self.boundary)


def build_multipart(
    data: dict[str, str] | None,
    files: dict[str, bytes | BinaryIO | tuple[str, bytes | BinaryIO, str | None]],
    boundary: str | None = None,
) -> tuple[str, bytes]:
    """
    Build a complete multipart/form-data body in memory.

    `files` values can be bytes, a readable stream, or
    (filename, bytes|stream, content_type|None).
    """
    buf = io.BytesIO()
    form = FormBuilder(buf, boundary=boundary)
    if data:
        for name, value in data.items():
            form.add_field(name, value)
    for field, val in files.items():
        if isinstance(val, (bytes, bytearray)):
            form.add_file_reader(field, val, field, DEFAULT_CONTENT_TYPE)
        elif isinstance(val, tuple):
            filename, content, ctype = val
            form.add_file_reader(field, content, filename, ctype or DEFAULT_CONTENT_TYPE)
        else:
            form.add_file_reader(field, val)
    form.close()
    return form.content_type, buf.getvalue()
