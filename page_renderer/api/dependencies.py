"""
API Dependencies
================

FastAPI dependencies resolving objects owned by the application lifespan.
"""

from fastapi import Request

from page_renderer.config.settings import Settings, get_settings
from page_renderer.core.rendering.errors import EngineUnavailable
from page_renderer.core.rendering.renderer import Renderer


def get_renderer(request: Request) -> Renderer:
    """The renderer created at startup."""
    renderer = getattr(request.app.state, "renderer", None)
    if renderer is None:
        raise EngineUnavailable("Renderer not initialized")
    return renderer


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()
