"""Pytest configuration and fixtures."""

import io

import pytest
from formpost.multipart import FormBuilder

BOUNDARY = "test-boundary-1234"


@pytest.fixture
def body():
    """In-memory sink for multipart output."""
    return io.BytesIO()


@pytest.fixture
def form(body):
    """FormBuilder writing into `body` with a fixed boundary."""
    return FormBuilder(body, boundary=BOUNDARY)


@pytest.fixture
def write_file(tmp_path):
    """Factory creating a file under tmp_path and returning its path."""

    def _write(name: str, content: bytes):
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _write
