from __future__ import annotations

import os


def base_filename(path: str) -> str:
    """
    Return the last segment of ``path``.

    Only the platform's separators count: on POSIX a backslash is ordinary
    filename text and is kept.
    """
    separators = os.sep + (os.altsep or "")
    return os.path.basename(path.rstrip(separators))
