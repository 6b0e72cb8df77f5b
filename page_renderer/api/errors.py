"""
API Error Responses
===================

Maps the rendering error taxonomy onto HTTP status codes and structured
JSON error bodies.
"""

from typing import Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from page_renderer.config.logging import get_logger
from page_renderer.core.rendering.errors import ErrorKind, NavigationFailed, RenderError
from page_renderer.models.schemas import ErrorResponse

logger = get_logger(__name__)

ERROR_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.DOMAIN_REJECTED: 403,
    ErrorKind.NAVIGATION_FAILED: 502,
    ErrorKind.CAPTURE_FAILED: 500,
    ErrorKind.ENGINE_UNAVAILABLE: 503,
}


def status_for(error: RenderError) -> int:
    """HTTP status code for a render error."""
    if isinstance(error, NavigationFailed) and error.timed_out:
        return 504
    return ERROR_STATUS.get(error.kind, 500)


def render_error_response(request: Request, error: RenderError) -> JSONResponse:
    """Structured JSON response for a render error."""
    status_code = status_for(error)
    details = {"url": error.url} if error.url else None

    error_response = ErrorResponse(
        error=error.message,
        error_code=error.kind.value.upper(),
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Render request failed",
        error_code=error_response.error_code,
        status_code=status_code,
        error_message=error.message,
        url=error.url,
        request_id=error_response.request_id,
    )

    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))
