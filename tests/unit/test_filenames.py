"""
Unit Tests for Filename Helpers
===============================
"""

import pytest

from page_renderer.utils.filenames import content_disposition, get_pdf_filename


class TestGetPdfFilename:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://example.com/reports/q1.html", "q1.pdf"),
            ("https://example.com/", "example.com.pdf"),
            ("https://example.com", "example.com.pdf"),
            ("https://example.com/doc.pdf", "doc.pdf"),
            ("https://example.com/DOC.PDF", "DOC.pdf"),
            ("https://example.com/archive.tar.gz", "archive.tar.pdf"),
            ("https://example.com/.hidden", ".hidden.pdf"),
            ("https://example.com/docs/readme", "readme.pdf"),
            ("https://example.com/noext", "noext.pdf"),
            ("https://example.com/page?id=3", "page.pdf"),
        ],
    )
    def test_derived_name(self, url, expected):
        assert get_pdf_filename(url) == expected


class TestContentDisposition:
    def test_plain_name(self):
        assert content_disposition("q1.pdf") == 'attachment; filename="q1.pdf"'

    def test_inline(self):
        assert content_disposition("q1.pdf", "inline") == 'inline; filename="q1.pdf"'

    def test_non_ascii_name_encoded(self):
        value = content_disposition("résumé.pdf")

        assert value.startswith('attachment; filename="r?sum?.pdf"')
        assert "filename*=UTF-8''r%C3%A9sum%C3%A9.pdf" in value

    def test_quotes_stripped_from_fallback(self):
        value = content_disposition('a"b.pdf')
        assert 'filename="ab.pdf"' in value

    def test_control_characters_stripped_from_fallback(self):
        value = content_disposition("a\r\nb\x00.pdf")

        assert "\r" not in value and "\n" not in value and "\x00" not in value
        assert 'filename="ab.pdf"' in value
        assert "filename*=UTF-8''a%0D%0Ab%00.pdf" in value
