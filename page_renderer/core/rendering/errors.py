"""
Render Errors
=============

Error taxonomy shared by the rendering core and the HTTP layer.
Each error carries a stable ``ErrorKind`` that the HTTP layer maps to a
status code.
"""

from enum import Enum
from typing import Optional, Sequence


class ErrorKind(str, Enum):
    """Stable error-kind signal exposed to the HTTP layer."""
    VALIDATION_FAILED = "validation_failed"
    DOMAIN_REJECTED = "domain_rejected"
    NAVIGATION_FAILED = "navigation_failed"
    ENGINE_UNAVAILABLE = "engine_unavailable"
    CAPTURE_FAILED = "capture_failed"


class RenderError(Exception):
    """Base class for all rendering failures."""

    kind: ErrorKind = ErrorKind.CAPTURE_FAILED

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url


class ValidationFailed(RenderError):
    """Request options could not be validated."""

    kind = ErrorKind.VALIDATION_FAILED


class DomainRejected(RenderError):
    """Target hostname does not match any allowed pattern."""

    kind = ErrorKind.DOMAIN_REJECTED

    def __init__(self, url: str, patterns: Sequence[str]):
        self.patterns = list(patterns)
        super().__init__(
            "Domain not allowed. URL domain must match one of the allowed patterns: "
            + ", ".join(self.patterns),
            url=url,
        )


class NavigationFailed(RenderError):
    """The page could not be loaded (timeout, DNS, refused connection, crash)."""

    kind = ErrorKind.NAVIGATION_FAILED

    def __init__(self, message: str, url: Optional[str] = None, timed_out: bool = False):
        super().__init__(message, url=url)
        self.timed_out = timed_out


class EngineUnavailable(RenderError):
    """The browser process is not running or has disconnected."""

    kind = ErrorKind.ENGINE_UNAVAILABLE


class CaptureFailed(RenderError):
    """The engine rejected a capture call."""

    kind = ErrorKind.CAPTURE_FAILED
