from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class NamedSource(Protocol):
    """
    A byte source that knows its own filename.

    Regular file objects satisfy this through their ``name`` attribute.
    """

    name: str


@runtime_checkable
class ContentTypedSource(Protocol):
    """A byte source that knows the MIME type of the bytes it produces."""

    content_type: str


def source_name(source: object) -> str:
    # Files opened from a descriptor carry an int name; only strings count.
    if isinstance(source, NamedSource) and isinstance(source.name, str):
        return source.name
    return ""


def source_content_type(source: object) -> str:
    if isinstance(source, ContentTypedSource) and isinstance(source.content_type, str):
        return source.content_type
    return ""
