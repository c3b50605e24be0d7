from __future__ import annotations

from formpost.utils import base_filename


def _sanitize_value(value: str) -> str:
    """
    Strip CR, LF, and null bytes from a header value to prevent header
    injection inside a part.
    """
    return value.replace("\r", "").replace("\n", "").replace("\x00", "")


def escape_quotes(value: str) -> str:
    """Backslash-escape every backslash and double quote in ``value``."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def unescape_quotes(value: str) -> str:
    """Inverse of :func:`escape_quotes`."""
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            ch = next(chars, "\\")
        out.append(ch)
    return "".join(out)


def content_disposition(name: str, filename: str | None = None) -> str:
    """
    Build a ``Content-Disposition`` value for a form-data part.

    The filename, when given, is reduced to its last path segment before
    escaping; an empty filename is still emitted as ``filename=""``.
    """
    value = f'form-data; name="{escape_quotes(name)}"'
    if filename is not None:
        value += f'; filename="{escape_quotes(base_filename(filename))}"'
    return value


def part_headers(
    name: str,
    filename: str | None = None,
    content_type: str | None = None,
) -> list[tuple[str, str]]:
    """
    Ordered MIME headers for one part: ``Content-Disposition`` first, then
    ``Content-Type`` when one is given.
    """
    headers = [("Content-Disposition", content_disposition(name, filename))]
    if content_type:
        headers.append(("Content-Type", _sanitize_value(content_type)))
    return headers
