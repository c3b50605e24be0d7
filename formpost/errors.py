class FormError(Exception):
    """Base error for formpost."""


class InvalidFieldError(FormError, ValueError):
    """Raised when a field name, filename or file handle is unusable."""


class BoundaryError(FormError, ValueError):
    """Raised when a multipart boundary does not satisfy RFC 2046."""


class FormClosedError(FormError):
    """Raised when a form body is written to or closed after it was closed."""
