"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image
from playwright.async_api import Browser, BrowserContext, Page

from ux_compare.models.config import CompareConfig, PageConfig, ViewportConfig
from ux_compare.models.results import CaptureResult


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def desktop_viewport() -> ViewportConfig:
    """Create a desktop viewport configuration."""
    return ViewportConfig(name="desktop", width=1440, height=900)


@pytest.fixture
def mobile_viewport() -> ViewportConfig:
    """Create a mobile viewport configuration."""
    return ViewportConfig(name="mobile", width=390, height=844)


@pytest.fixture
def page_config() -> PageConfig:
    """Create a page with a per-viewport design mapping."""
    return PageConfig(
        name="Dashboard",
        path="/dashboard",
        design_images={"desktop": "designs/dashboard-desktop.png"},
    )


@pytest.fixture
def compare_config(
    desktop_viewport: ViewportConfig,
    mobile_viewport: ViewportConfig,
    page_config: PageConfig,
) -> CompareConfig:
    """Create a test comparison configuration."""
    return CompareConfig(
        base_url="https://example.com",
        output_dir="out",
        threshold=0.1,
        failure_threshold=1.0,
        viewports=[desktop_viewport, mobile_viewport],
        pages=[page_config],
    )


@pytest.fixture
def raw_config() -> dict:
    """A config as written by hand, with camelCase keys."""
    return {
        "baseUrl": "http://localhost:3000",
        "outputDir": "results",
        "threshold": 0.2,
        "failureThreshold": 2.5,
        "viewports": [
            {"name": "desktop", "width": 1440, "height": 900, "deviceScaleFactor": 1},
            {"name": "mobile", "width": 390, "height": 844, "deviceScaleFactor": 2},
        ],
        "globalActions": [
            {"type": "goto", "url": "/login", "waitUntil": "networkidle0"},
            {"type": "type", "selector": "#email", "text": "qa@example.com"},
            {"type": "click", "selector": "button[type=submit]", "waitForNavigation": True},
        ],
        "pages": [
            {
                "name": "Home",
                "path": "/",
                "designImage": "designs/home.png",
            },
            {
                "name": "Settings Page",
                "path": "/settings",
                "designImages": {"desktop": "designs/settings-desktop.png"},
                "actions": [
                    {"type": "waitForSelector", "selector": ".settings", "options": {"visible": True}},
                ],
            },
        ],
    }


@pytest.fixture
def temp_config_file(raw_config: dict, tmp_path: Path) -> Path:
    """Write the raw config to a temporary file."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(raw_config))
    return config_file


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page."""
    page = AsyncMock(spec=Page)
    page.url = "about:blank"
    page.screenshot = AsyncMock()
    page.goto = AsyncMock()
    page.reload = AsyncMock()
    page.click = AsyncMock()
    page.select_option = AsyncMock()
    page.evaluate = AsyncMock()
    page.set_viewport_size = AsyncMock()
    page.locator = Mock(return_value=AsyncMock())
    page.wait_for_selector = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.wait_for_url = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.keyboard = AsyncMock()
    page.keyboard.press = AsyncMock()
    page.context = Mock()
    page.context.add_cookies = AsyncMock()
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser context."""
    context = AsyncMock(spec=BrowserContext)
    context.new_page = AsyncMock(return_value=mock_page)
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    """Create a mock Playwright browser."""
    browser = AsyncMock(spec=Browser)
    browser.new_context = AsyncMock(return_value=mock_context)
    return browser


@pytest.fixture(autouse=True)
def no_retry_backoff(monkeypatch):
    """Keep retry tests fast."""
    monkeypatch.setattr("ux_compare.executor.action_runner.RETRY_BACKOFF_SECONDS", 0)


# ============================================================================
# Image Helpers
# ============================================================================


def make_png(
    path: Path,
    size: tuple[int, int],
    color: tuple[int, int, int] = (255, 255, 255),
    dots: list[tuple[int, int]] | None = None,
    dot_color: tuple[int, int, int] = (0, 0, 0),
) -> Path:
    """Write a solid PNG, optionally with single pixels set to ``dot_color``."""
    img = Image.new("RGB", size, color)
    for xy in dots or []:
        img.putpixel(xy, dot_color)
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path)
    return path


@pytest.fixture
def png():
    """Fixture that provides the make_png helper."""
    return make_png


@pytest.fixture
def capture_factory(tmp_path: Path):
    """Build CaptureResults pointing into tmp_path."""
    def _make(
        name: str = "home-desktop",
        design: Path | None = None,
        declared: bool = False,
        viewport: str = "desktop",
    ) -> CaptureResult:
        return CaptureResult(
            name=name,
            page_name=name.split("-")[0],
            viewport=viewport,
            url="https://example.com/",
            screenshot_path=tmp_path / "screenshots" / f"{name}.png",
            design_image=design,
            design_mapping_declared=declared,
        )
    return _make
