"""
Page Renderer
=============

Rendering-as-a-service over a headless Chromium driven by Playwright.

Given a target URL and rendering options, the service returns one of:
- the fully-executed HTML of the page
- a rasterized screenshot (png, jpeg or webp)
- a paginated PDF

This package provides:
- FastAPI REST endpoints for HTTP access
- The rendering orchestration core (browser lifecycle, per-request sessions,
  domain allow-listing, raster post-processing)
- Environment-based configuration and structured logging
"""

__version__ = "1.0.0"
__author__ = "Page Renderer Team"
