"""
Domain Policy
=============

Allow-list of target hostnames. Keeps the service from being used as an
open fetch proxy: a URL whose host matches none of the configured glob
patterns is rejected before any browsing context is created for it.
"""

import re
from typing import Iterable, List, Optional, Pattern, Tuple
from urllib.parse import urlsplit

from page_renderer.config.logging import get_logger
from page_renderer.core.rendering.errors import DomainRejected
from page_renderer.utils.urls import normalize_url

logger = get_logger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_INVALID_HOST_CHARS = re.compile(r"[\s<>\"{}|\\^`%]")


def extract_hostname(url: str) -> Optional[str]:
    """
    Extract the lower-cased hostname from a URL.

    Bare domains (``example.com/path``) are treated as ``https://`` URLs and
    the URL is normalized the way the browser will load it. Returns None
    when no valid hostname can be extracted.
    """
    url = normalize_url(url)
    if not _SCHEME_RE.match(url):
        url = normalize_url(f"https://{url}")

    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None

    if not hostname or _INVALID_HOST_CHARS.search(hostname):
        return None
    return hostname.lower()


def compile_pattern(pattern: str) -> Pattern[str]:
    """Compile a hostname glob where ``*`` matches any run of characters."""
    regex = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(f"^{regex}$", re.IGNORECASE)


class DomainPolicy:
    """Evaluates target URLs against a set of hostname glob patterns."""

    def __init__(self, patterns: Optional[Iterable[str]] = None):
        cleaned = [p.strip() for p in (patterns or []) if p and p.strip()]
        self._patterns: Tuple[str, ...] = tuple(cleaned)
        self._compiled: List[Pattern[str]] = [compile_pattern(p) for p in cleaned]

    @classmethod
    def from_setting(cls, value: Optional[str]) -> "DomainPolicy":
        """Build a policy from a comma-separated setting value."""
        if not value or not value.strip():
            return cls()
        return cls(value.split(","))

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self._patterns

    @property
    def restricted(self) -> bool:
        """Whether an allow-list is configured at all."""
        return bool(self._patterns)

    def is_allowed(self, url: str) -> bool:
        """Check whether the URL's hostname matches an allowed pattern."""
        if not self._compiled:
            return True

        hostname = extract_hostname(url)
        if hostname is None:
            return False

        return any(regex.match(hostname) for regex in self._compiled)

    def assert_allowed(self, url: str) -> None:
        """
        Raise DomainRejected unless the URL's hostname is allowed.

        Raises:
            DomainRejected: If the URL does not match the allow-list
        """
        if not self.is_allowed(url):
            logger.warning("Rejected render target", url=url, allowed_domains=list(self._patterns))
            raise DomainRejected(url, self._patterns)
