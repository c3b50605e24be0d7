"""Tests for formpost.models module."""

import io

from formpost.models import (
    ContentTypedSource,
    NamedSource,
    source_content_type,
    source_name,
)


class LabeledReader(io.BytesIO):
    def __init__(self, data: bytes, name: str, content_type: str) -> None:
        super().__init__(data)
        self.name = name
        self.content_type = content_type


class TestCapabilities:
    """Tests for source capability protocols."""

    def test_labeled_reader_has_both_capabilities(self):
        """Test a reader with name and content_type matches both protocols."""
        reader = LabeledReader(b"x", "a.txt", "text/plain")
        assert isinstance(reader, NamedSource)
        assert isinstance(reader, ContentTypedSource)

    def test_bytesio_has_no_capabilities(self):
        """Test a bare BytesIO exposes neither capability."""
        reader = io.BytesIO(b"x")
        assert not isinstance(reader, NamedSource)
        assert not isinstance(reader, ContentTypedSource)

    def test_real_file_is_named(self, tmp_path):
        """Test regular files expose their path as name."""
        path = tmp_path / "doc.bin"
        path.write_bytes(b"abc")
        with open(path, "rb") as f:
            assert isinstance(f, NamedSource)
            assert source_name(f) == str(path)


class TestAccessors:
    """Tests for source_name and source_content_type."""

    def test_values_returned(self):
        """Test string attributes are returned."""
        reader = LabeledReader(b"", "a.txt", "text/plain")
        assert source_name(reader) == "a.txt"
        assert source_content_type(reader) == "text/plain"

    def test_missing_attributes(self):
        """Test missing attributes yield empty strings."""
        assert source_name(io.BytesIO()) == ""
        assert source_content_type(io.BytesIO()) == ""

    def test_non_string_name_ignored(self, tmp_path):
        """Test files opened from a descriptor have no usable name."""
        path = tmp_path / "fd.bin"
        path.write_bytes(b"abc")
        with open(path, "rb") as raw, open(raw.fileno(), "rb", closefd=False) as f:
            assert source_name(f) == ""
