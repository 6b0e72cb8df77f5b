"""
Pydantic Models and Schemas
===========================

Render option bundles, API responses and internal data structures.
Query parameters arrive with the camelCase names used by the public API
(``waitUntil``, ``deviceScaleFactor``, ``clip.x``); snake_case names are
accepted as well.
"""

import json
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from page_renderer.utils.urls import normalize_url


_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_HEADER_VALUE_RE = re.compile(r"^[\t\x20-\x7e\x80-\xff]*$")

_WAIT_UNTIL_ALIASES = {
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class ImageType(str, Enum):
    """Screenshot output types."""
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def lossy(self) -> bool:
        return self is not ImageType.PNG


class MediaType(str, Enum):
    """CSS media types the page can be emulated with."""
    SCREEN = "screen"
    PRINT = "print"


class RequestModel(BaseModel):
    """Base for option bundles parsed from query parameters."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# Page Options
class Credentials(RequestModel):
    """HTTP basic-auth credentials used when the page challenges."""
    username: str = Field(..., description="Username")
    password: str = Field("", description="Password")


class PageOptions(RequestModel):
    """Navigation options shared by every endpoint."""
    timeout: int = Field(30000, ge=0, le=300000, description="Navigation timeout in milliseconds")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "networkidle", alias="waitUntil", description="Page-load milestone ending navigation"
    )
    headers: Optional[Dict[str, str]] = Field(None, description="Extra HTTP headers")
    credentials: Optional[Credentials] = Field(None, description="Basic-auth credentials")
    emulate_media_type: Optional[MediaType] = Field(
        None, alias="emulateMediaType", description="Forced CSS media type"
    )

    @field_validator("wait_until", mode="before")
    @classmethod
    def normalize_wait_until(cls, v: Any) -> Any:
        """Accept the puppeteer network-idle spellings."""
        if isinstance(v, str):
            return _WAIT_UNTIL_ALIASES.get(v.lower(), v.lower())
        return v

    @field_validator("headers", mode="before")
    @classmethod
    def parse_headers(cls, v: Any) -> Any:
        """Headers arrive as a JSON object string in query parameters."""
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"headers must be a JSON object: {e.msg}")
        if isinstance(v, dict):
            return {str(name): value if isinstance(value, str) else str(value) for name, value in v.items()}
        return v

    @field_validator("headers")
    @classmethod
    def validate_headers(cls, v: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        """Reject header names and values the browser would refuse."""
        if v is None:
            return v
        for name, value in v.items():
            if not _HEADER_NAME_RE.match(name):
                raise ValueError(f"Invalid header name: {name!r}")
            if not _HEADER_VALUE_RE.match(value):
                raise ValueError(f"Invalid value for header {name!r}")
        return v

    @field_validator("emulate_media_type", mode="before")
    @classmethod
    def empty_media_type(cls, v: Any) -> Any:
        if v == "":
            return None
        return v


# Viewport Options
class ViewportOptions(RequestModel):
    """Browsing-context viewport for screenshots."""
    width: int = Field(1200, gt=0, le=10000, description="Viewport width in CSS pixels")
    height: int = Field(800, gt=0, le=10000, description="Viewport height in CSS pixels")
    device_scale_factor: float = Field(
        1.0, gt=0, le=4.0, alias="deviceScaleFactor", description="Device pixel ratio"
    )
    is_mobile: bool = Field(False, alias="isMobile", description="Emulate a mobile device")
    has_touch: bool = Field(False, alias="hasTouch", description="Enable touch events")
    is_landscape: bool = Field(False, alias="isLandscape", description="Landscape orientation")


# Screenshot Options
class Clip(RequestModel):
    """Region of the page to capture."""
    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class ScreenshotOptions(RequestModel):
    """Raster capture options."""
    type: ImageType = Field(ImageType.PNG, description="Output image type")
    quality: Optional[int] = Field(None, ge=0, le=100, description="Quality for lossy types")
    full_page: bool = Field(False, alias="fullPage", description="Capture the full scrollable page")
    omit_background: bool = Field(
        False, alias="omitBackground", description="Transparent background for png"
    )
    clip: Optional[Clip] = Field(None, description="Capture region")
    animation_timeout: int = Field(
        0, ge=0, le=30000, alias="animationTimeout",
        description="Max milliseconds to wait for animations to settle",
    )

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.lower()
            return "jpeg" if v == "jpg" else v
        return v


# PDF Options
class PdfMargin(RequestModel):
    """Page margins; CSS lengths such as ``1cm`` or ``10px``."""
    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None


class PdfOptions(RequestModel):
    """Paginated document layout options."""
    scale: float = Field(1.0, ge=0.1, le=2.0, description="Rendering scale")
    display_header_footer: bool = Field(False, alias="displayHeaderFooter")
    header_template: Optional[str] = Field(None, alias="headerTemplate")
    footer_template: Optional[str] = Field(None, alias="footerTemplate")
    print_background: bool = Field(False, alias="printBackground")
    landscape: bool = False
    page_ranges: Optional[str] = Field(None, alias="pageRanges", description="e.g. '1-5, 8'")
    format: Optional[str] = Field(None, description="Paper format, e.g. A4 or Letter")
    width: Optional[str] = Field(None, description="Paper width; overrides format")
    height: Optional[str] = Field(None, description="Paper height; overrides format")
    margin: Optional[PdfMargin] = None
    prefer_css_page_size: bool = Field(False, alias="preferCSSPageSize")

    def to_engine_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for the engine's pdf call, unset values omitted."""
        kwargs = self.model_dump(exclude_none=True, by_alias=False)
        if self.margin is not None:
            kwargs["margin"] = self.margin.model_dump(exclude_none=True)
        return kwargs


class PdfResponseOptions(RequestModel):
    """How the PDF is handed back to the client."""
    filename: Optional[str] = Field(None, description="Download filename")
    content_disposition_type: Literal["attachment", "inline"] = Field(
        "attachment", alias="contentDispositionType"
    )


class TargetParams(RequestModel):
    """Target address of a render request."""
    url: str = Field(..., min_length=1, description="Page to render")

    @model_validator(mode="after")
    def ensure_scheme(self) -> "TargetParams":
        """Bare domains are rendered over https."""
        self.url = normalize_url(self.url)
        if not re.match(r"^https?://", self.url, re.IGNORECASE):
            self.url = normalize_url(f"https://{self.url}")
        return self


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "unhealthy"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=_now, description="Check timestamp")
    version: str = Field(..., description="Application version")
    browser_connected: bool = Field(..., description="Browser process connectivity")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_now, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
