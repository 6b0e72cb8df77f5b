"""
Unit Tests for Schemas and Query Parsing
========================================

Option bundle validation, camelCase aliases and dotted query expansion.
"""

import pytest
from pydantic import ValidationError
from starlette.datastructures import QueryParams

from page_renderer.api.params import expand_query, parse_options
from page_renderer.core.rendering.errors import ErrorKind, ValidationFailed
from page_renderer.models.schemas import (
    ImageType,
    MediaType,
    PageOptions,
    PdfOptions,
    PdfResponseOptions,
    ScreenshotOptions,
    TargetParams,
    ViewportOptions,
)


class TestPageOptions:
    """Test navigation option parsing."""

    def test_defaults(self):
        options = PageOptions()
        assert options.timeout == 30000
        assert options.wait_until == "networkidle"
        assert options.headers is None
        assert options.credentials is None
        assert options.emulate_media_type is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("networkidle0", "networkidle"),
            ("networkidle2", "networkidle"),
            ("DOMContentLoaded", "domcontentloaded"),
            ("load", "load"),
        ],
    )
    def test_wait_until_aliases(self, value, expected):
        assert PageOptions.model_validate({"waitUntil": value}).wait_until == expected

    def test_unknown_wait_until_rejected(self):
        with pytest.raises(ValidationError):
            PageOptions.model_validate({"waitUntil": "whenever"})

    def test_snake_case_accepted(self):
        options = PageOptions.model_validate({"wait_until": "load", "emulate_media_type": "print"})
        assert options.wait_until == "load"
        assert options.emulate_media_type is MediaType.PRINT

    def test_headers_json_string(self):
        options = PageOptions.model_validate({"headers": '{"Accept-Language": "de", "X-Id": 7}'})
        assert options.headers == {"Accept-Language": "de", "X-Id": "7"}

    @pytest.mark.parametrize("headers", ["not json", '{"bad name": "x"}', '{"X-A": "a\\nb"}'])
    def test_invalid_headers_rejected(self, headers):
        with pytest.raises(ValidationError):
            PageOptions.model_validate({"headers": headers})

    def test_empty_media_type_is_unset(self):
        assert PageOptions.model_validate({"emulateMediaType": ""}).emulate_media_type is None

    @pytest.mark.parametrize("timeout", ["-1", "300001", "soon"])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            PageOptions.model_validate({"timeout": timeout})


class TestViewportAndScreenshotOptions:
    def test_viewport_defaults(self):
        viewport = ViewportOptions()
        assert (viewport.width, viewport.height) == (1200, 800)
        assert viewport.device_scale_factor == 1.0

    @pytest.mark.parametrize("factor", ["0", "4.5"])
    def test_device_scale_factor_bounds(self, factor):
        with pytest.raises(ValidationError):
            ViewportOptions.model_validate({"deviceScaleFactor": factor})

    def test_screenshot_type_normalized(self):
        assert ScreenshotOptions.model_validate({"type": "JPG"}).type is ImageType.JPEG
        assert ScreenshotOptions.model_validate({"type": "webp"}).type is ImageType.WEBP

    def test_unsupported_screenshot_type(self):
        with pytest.raises(ValidationError):
            ScreenshotOptions.model_validate({"type": "gif"})

    def test_lossy_types(self):
        assert not ImageType.PNG.lossy
        assert ImageType.JPEG.lossy
        assert ImageType.WEBP.lossy


class TestPdfOptions:
    def test_engine_kwargs_use_snake_case_and_skip_unset(self):
        options = PdfOptions.model_validate({"preferCSSPageSize": "true", "pageRanges": "1-2"})
        kwargs = options.to_engine_kwargs()

        assert kwargs["prefer_css_page_size"] is True
        assert kwargs["page_ranges"] == "1-2"
        assert "format" not in kwargs
        assert "margin" not in kwargs

    def test_response_options(self):
        options = PdfResponseOptions.model_validate({"contentDispositionType": "inline"})
        assert options.content_disposition_type == "inline"
        with pytest.raises(ValidationError):
            PdfResponseOptions.model_validate({"contentDispositionType": "download"})


class TestTargetParams:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("example.com", "https://example.com"),
            ("  http://example.com/a ", "http://example.com/a"),
            ("https://example.com", "https://example.com"),
            ("https://evil.com\\@a.example.com/", "https://evil.com/@a.example.com/"),
        ],
    )
    def test_scheme_defaults_to_https(self, url, expected):
        assert TargetParams(url=url).url == expected

    def test_url_required(self):
        with pytest.raises(ValidationError):
            TargetParams.model_validate({})


class TestQueryParsing:
    def test_dotted_keys_expanded(self):
        params = QueryParams("url=example.com&clip.x=0&clip.width=100&margin.top=1cm")

        assert expand_query(params) == {
            "url": "example.com",
            "clip": {"x": "0", "width": "100"},
            "margin": {"top": "1cm"},
        }

    def test_last_value_wins(self):
        assert expand_query(QueryParams("type=png&type=jpeg")) == {"type": "jpeg"}

    def test_nested_clip_validates(self):
        data = expand_query(QueryParams("clip.x=0&clip.y=0&clip.width=100&clip.height=50"))
        options = parse_options(ScreenshotOptions, data)
        assert options.clip.width == 100

    def test_parse_options_raises_validation_failed(self):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_options(ScreenshotOptions, {"quality": "200"})

        assert exc_info.value.kind is ErrorKind.VALIDATION_FAILED
        assert "quality" in exc_info.value.message
