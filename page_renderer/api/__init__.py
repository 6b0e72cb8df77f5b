"""
FastAPI REST Endpoints
======================

REST API endpoints for HTTP access to the rendering functionality.

Endpoints:
- GET /html: Fully-executed HTML of the target page
- GET /screenshot: Raster screenshot of the target page
- GET /pdf: Paginated PDF of the target page
- GET /health: Health check endpoint
"""
