"""
URL Normalization
=================

Brings render targets into the form the browser itself will load, so the
domain allow-list and the navigation see the same host.
"""

import re

_SPECIAL_SCHEME_RE = re.compile(r"^https?:", re.IGNORECASE)
_TAB_OR_NEWLINE_RE = re.compile(r"[\t\n\r]")
_C0_AND_SPACE = "".join(chr(code) for code in range(0x21))


def normalize_url(url: str) -> str:
    """
    Apply the browser's pre-parse rewrites to an http(s) URL.

    Leading and trailing control characters and spaces are trimmed and
    tabs and newlines removed. For http(s) URLs a backslash before the query
    or fragment is a path separator to the browser, so it becomes ``/``:
    ``https://evil.com\\@a.example.com/`` loads ``evil.com``.

    >>> normalize_url("https://evil.com\\\\@a.example.com/")
    'https://evil.com/@a.example.com/'
    """
    url = _TAB_OR_NEWLINE_RE.sub("", url.strip(_C0_AND_SPACE))
    if not _SPECIAL_SCHEME_RE.match(url):
        return url

    end = len(url)
    for delimiter in ("?", "#"):
        position = url.find(delimiter)
        if position != -1:
            end = min(end, position)
    return url[:end].replace("\\", "/") + url[end:]
