from formpost.errors import (
    BoundaryError,
    FormClosedError,
    FormError,
    InvalidFieldError,
)
from formpost.headers import (
    content_disposition,
    escape_quotes,
    part_headers,
    unescape_quotes,
)
from formpost.models import ContentTypedSource, NamedSource
from formpost.multipart import FormBuilder, MultipartWriter, build_multipart
from formpost.sniff import DEFAULT_CONTENT_TYPE, detect_content_type

__all__ = [
    "FormBuilder",
    "MultipartWriter",
    "build_multipart",
    "detect_content_type",
    "DEFAULT_CONTENT_TYPE",
    "content_disposition",
    "escape_quotes",
    "unescape_quotes",
    "part_headers",
    "NamedSource",
    "ContentTypedSource",
    "FormError",
    "InvalidFieldError",
    "BoundaryError",
    "FormClosedError",
]
