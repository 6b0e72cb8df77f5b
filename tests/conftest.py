"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, fake browser objects and an API client wired to
a renderer over the fake browser.
"""

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from page_renderer.api.main import create_app
from page_renderer.config.settings import Settings
from page_renderer.core.rendering.browser import BrowserProcess
from page_renderer.core.rendering.domain_policy import DomainPolicy
from page_renderer.core.rendering.renderer import Renderer

from tests.utils.mocks import MockBrowser, MockContext, MockPage, make_browser_process


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    allowed_domains: str = ""
    browser_args: str = ""
    enable_ui: bool = False


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def mock_page() -> MockPage:
    return MockPage()


@pytest.fixture
def mock_context(mock_page: MockPage) -> MockContext:
    return MockContext(mock_page)


@pytest.fixture
def mock_browser(mock_context: MockContext) -> MockBrowser:
    return MockBrowser(mock_context)


@pytest.fixture
def browser_process(mock_browser: MockBrowser) -> BrowserProcess:
    """Browser process running on the mock browser."""
    return make_browser_process(mock_browser)


@pytest.fixture
def renderer(browser_process: BrowserProcess) -> Renderer:
    """Renderer with no allow-list."""
    return Renderer(browser_process)


def build_test_app(settings: Settings, renderer: Renderer) -> FastAPI:
    """App with the renderer injected directly, lifespan not run."""
    app = create_app(settings)
    app.state.renderer = renderer
    return app


@pytest.fixture
def app(test_settings: TestSettings, renderer: Renderer) -> FastAPI:
    return build_test_app(test_settings, renderer)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """FastAPI test client; lifespan is not started so no browser launches."""
    yield TestClient(app)


@pytest.fixture
def restricted_renderer(browser_process: BrowserProcess) -> Renderer:
    """Renderer that only allows *.mycompany.com."""
    return Renderer(browser_process, domain_policy=DomainPolicy.from_setting("*.mycompany.com"))
