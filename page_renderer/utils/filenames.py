"""
Filename Helpers
================

Download filename derivation for rendered PDFs and the matching
Content-Disposition header.
"""

import re
from urllib.parse import quote, urlsplit

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def get_pdf_filename(url: str) -> str:
    """
    Derive a PDF filename from the rendered URL.

    The last path segment without its extension, or the hostname when the
    path is the root; ``.pdf`` is appended unless already present.

    >>> get_pdf_filename("https://example.com/reports/q1.html")
    'q1.pdf'
    """
    parts = urlsplit(url)
    filename = parts.hostname or ""

    if parts.path not in ("", "/"):
        filename = parts.path.split("/")[-1]

        ext_dot_position = filename.rfind(".")
        if ext_dot_position > 0:
            filename = filename[:ext_dot_position]

    if not filename.lower().endswith(".pdf"):
        filename += ".pdf"

    return filename


def content_disposition(filename: str, disposition_type: str = "attachment") -> str:
    """Build a Content-Disposition value, RFC 5987 encoded for non-ASCII names."""
    quoted = quote(filename)
    if quoted != filename or '"' in filename or "\\" in filename:
        fallback = filename.encode("ascii", "replace").decode("ascii")
        fallback = _CONTROL_CHARS_RE.sub("", fallback).replace('"', "").replace("\\", "")
        return f"{disposition_type}; filename=\"{fallback}\"; filename*=UTF-8''{quoted}"
    return f'{disposition_type}; filename="{filename}"'
