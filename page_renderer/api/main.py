"""
FastAPI Application
==================

Composition root of the service: builds the app, launches the shared
browser process during the lifespan and injects it into the renderer.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Optional
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from page_renderer.api.errors import render_error_response
from page_renderer.api.routes.health import router as health_router
from page_renderer.api.routes.render import router as render_router
from page_renderer.config.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from page_renderer.config.settings import Settings, get_settings
from page_renderer.core.rendering.browser import BrowserProcess, LaunchConfig
from page_renderer.core.rendering.domain_policy import DomainPolicy
from page_renderer.core.rendering.errors import EngineUnavailable, RenderError
from page_renderer.core.rendering.raster import RasterPostProcessor
from page_renderer.core.rendering.renderer import Renderer
from page_renderer.models.schemas import ErrorResponse

logger = get_logger(__name__)

UI_PATH = Path(__file__).parent / "static" / "ui.html"


def build_renderer(settings: Settings) -> Renderer:
    """Wire a renderer and its browser process from settings (not yet launched)."""
    browser = BrowserProcess(
        LaunchConfig(
            args=settings.browser_launch_args(),
            ignore_https_errors=settings.ignore_https_errors,
            headless=settings.browser_headless,
        )
    )
    return Renderer(
        browser,
        domain_policy=DomainPolicy.from_setting(settings.allowed_domains),
        raster=RasterPostProcessor(),
        max_concurrent_sessions=settings.max_concurrent_sessions,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info("Starting page renderer", environment=settings.environment)

    renderer = build_renderer(settings)

    # No partial availability: a browser that fails to launch aborts startup
    try:
        await renderer.browser.initialize()
    except EngineUnavailable as e:
        logger.error("Fail to initialize renderer", error=str(e))
        await renderer.close()
        raise RuntimeError(f"Renderer initialization failed: {e}") from e

    app.state.renderer = renderer
    logger.info(
        "Renderer initialized",
        allowed_domains=list(renderer.domain_policy.patterns) or None,
        max_concurrent_sessions=settings.max_concurrent_sessions,
    )

    try:
        yield
    finally:
        logger.info("Shutting down page renderer")
        app.state.renderer = None
        await renderer.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.

    Args:
        settings: Settings to use instead of the environment-derived ones

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Render web pages to HTML, screenshots and PDFs",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.renderer = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
        max_age=86400,
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next) -> Any:  # type: ignore
        """Tag the request and its log events with a request id."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        clear_request_context()
        bind_request_context(request_id=request_id, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response

    # Exception handlers
    @app.exception_handler(RenderError)
    async def render_exception_handler(request: Request, exc: RenderError) -> JSONResponse:
        """Map render errors raised outside the capture flow (e.g. validation)."""
        return render_error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> PlainTextResponse:
        if exc.status_code == 404:
            return PlainTextResponse("Not found.", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        error_response = ErrorResponse(
            error="Oops, an unexpected error seems to have occurred.",
            error_code="INTERNAL_ERROR",
            details={"exception": str(exc)} if settings.debug else None,
            request_id=getattr(request.state, "request_id", None),
        )

        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=error_response.request_id,
            exc_info=True,
        )

        return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))

    @app.get("/", response_class=HTMLResponse, tags=["General"])
    async def index() -> str:
        """Index page listing the endpoints."""
        message = (
            'You can use <a href="/html">/html</a>, <a href="/screenshot">/screenshot</a> '
            'or <a href="/pdf">/pdf</a> endpoint.'
        )
        if settings.enable_ui:
            message += ' <br><br>Or visit <a href="/ui">/ui</a> for the web interface.'
        return message

    @app.get("/ui", response_class=HTMLResponse, tags=["General"])
    async def ui() -> HTMLResponse:
        """Web interface for building render requests."""
        if not settings.enable_ui:
            return HTMLResponse("UI not enabled.", status_code=404)
        return HTMLResponse(UI_PATH.read_text(encoding="utf-8"))

    app.include_router(render_router)
    app.include_router(health_router)

    return app


# Development server runner
def run_server() -> None:
    """Run the server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "page_renderer.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run_server()
