"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from page_renderer.api.dependencies import get_app_settings
from page_renderer.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


def check_browser_health(request: Request) -> bool:
    """Whether the shared browser process is connected."""
    renderer = getattr(request.app.state, "renderer", None)
    if renderer is None:
        return False
    return renderer.browser.is_connected()


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> JSONResponse:
    """
    Report service health.

    The browser is never relaunched in-process, so a disconnected browser
    reports 503 for an external supervisor to act on.
    """
    settings = get_app_settings(request)
    browser_connected = check_browser_health(request)

    health = HealthStatus(
        status="healthy" if browser_connected else "unhealthy",
        version=settings.app_version,
        browser_connected=browser_connected,
    )
    return JSONResponse(
        status_code=200 if browser_connected else 503,
        content=health.model_dump(mode="json"),
    )
