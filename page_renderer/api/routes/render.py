"""
Render Routes
=============

FastAPI routes for the HTML, screenshot and PDF endpoints.
All options are read from the query string.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse

from page_renderer.api.dependencies import get_renderer
from page_renderer.api.errors import render_error_response
from page_renderer.api.params import expand_query, parse_options
from page_renderer.core.rendering.renderer import Renderer, run_capture
from page_renderer.models.schemas import (
    PageOptions,
    PdfOptions,
    PdfResponseOptions,
    ScreenshotOptions,
    TargetParams,
    ViewportOptions,
)
from page_renderer.utils.filenames import content_disposition, get_pdf_filename

router = APIRouter(tags=["Rendering"])


@router.get("/html")
async def render_html(request: Request, renderer: Renderer = Depends(get_renderer)) -> Response:
    """Fully-executed HTML of the target page."""
    query = expand_query(request.query_params)
    target = parse_options(TargetParams, query)
    page_options = parse_options(PageOptions, query)

    outcome = await run_capture(renderer.html(target.url, page_options))
    if not outcome.ok:
        return render_error_response(request, outcome.error)  # type: ignore[arg-type]

    return HTMLResponse(content=outcome.artifact, status_code=200)


@router.get("/screenshot")
async def render_screenshot(
    request: Request, renderer: Renderer = Depends(get_renderer)
) -> Response:
    """Raster screenshot of the target page."""
    query = expand_query(request.query_params)
    target = parse_options(TargetParams, query)
    page_options = parse_options(PageOptions, query)
    viewport_options = parse_options(ViewportOptions, query)
    screenshot_options = parse_options(ScreenshotOptions, query)

    outcome = await run_capture(
        renderer.screenshot(target.url, page_options, viewport_options, screenshot_options)
    )
    if not outcome.ok:
        return render_error_response(request, outcome.error)  # type: ignore[arg-type]

    screenshot = outcome.artifact
    return Response(
        content=screenshot.data,
        media_type=screenshot.content_type,
        headers={"Content-Length": str(len(screenshot.data))},
    )


@router.get("/pdf")
async def render_pdf(request: Request, renderer: Renderer = Depends(get_renderer)) -> Response:
    """Paginated PDF of the target page, served as a download by default."""
    query = expand_query(request.query_params)
    target = parse_options(TargetParams, query)
    response_options = parse_options(PdfResponseOptions, query)
    page_options = parse_options(PageOptions, query)
    pdf_options = parse_options(PdfOptions, query)

    outcome = await run_capture(renderer.pdf(target.url, page_options, pdf_options))
    if not outcome.ok:
        return render_error_response(request, outcome.error)  # type: ignore[arg-type]

    pdf = outcome.artifact
    filename = response_options.filename or get_pdf_filename(target.url)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Length": str(len(pdf)),
            "Content-Disposition": content_disposition(
                filename, response_options.content_disposition_type
            ),
        },
    )
