"""Screenshot capture — drives every page through every viewport on one browser page."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from playwright.async_api import Page

from ux_compare.errors import CaptureError
from ux_compare.models.config import CompareConfig, PageConfig, ViewportConfig
from ux_compare.models.results import CaptureResult
from ux_compare.url_utils import normalize_name, resolve_url

from .action_runner import run_actions
from .session import SessionState

logger = logging.getLogger(__name__)


def screenshot_name(page_name: str, viewport_name: str) -> str:
    """``Dashboard`` + ``desktop`` -> ``dashboard-desktop``."""
    return normalize_name(f"{page_name}-{viewport_name}")


class ScreenshotCapturer:
    """Captures one full-page screenshot per (viewport, page) pair.

    The page session is shared: viewports are processed in order, global
    actions run once on the first viewport, and later captures inherit the
    cookies, storage and URL left behind by earlier ones.
    """

    def __init__(self, config: CompareConfig, config_dir: Path, output_dir: Path):
        self.config = config
        self.config_dir = config_dir
        self.screenshots_dir = output_dir / "screenshots"
        self.screenshots_dir.mkdir(parents=True, exist_ok=True)

    async def capture(
        self, page: Page, state: SessionState | None = None,
    ) -> tuple[list[CaptureResult], SessionState]:
        if state is None:
            state = SessionState(url=page.url)
        results: list[CaptureResult] = []
        for viewport in self.config.viewports:
            state = await self._prepare_viewport(page, viewport, state)
            for entry in self.config.pages:
                result, state = await self._capture_page(page, viewport, entry, state)
                results.append(result)
        return results, state

    async def _prepare_viewport(
        self, page: Page, viewport: ViewportConfig, state: SessionState,
    ) -> SessionState:
        logger.info("Processing viewport: %s (%dx%d)", viewport.name, viewport.width, viewport.height)
        await page.set_viewport_size({"width": viewport.width, "height": viewport.height})
        state = state.with_viewport(viewport.name)

        if not state.setup_done:
            if self.config.global_actions:
                logger.info("Executing %d global action(s)...", len(self.config.global_actions))
            start = time.time()
            try:
                state = await run_actions(
                    page, self.config.global_actions, self.config.base_url, state)
            except Exception as e:
                logger.error("  ✗ Global actions failed for %s at %s: %s", viewport.name, page.url, e)
                raise CaptureError("global-actions", viewport.name, page.url, str(e)) from e
            state = state.with_setup_done()
            logger.info("Global actions completed in %dms", int((time.time() - start) * 1000))
        return state

    async def _capture_page(
        self,
        page: Page,
        viewport: ViewportConfig,
        entry: PageConfig,
        state: SessionState,
    ) -> tuple[CaptureResult, SessionState]:
        url = resolve_url(entry.path, self.config.base_url)
        name = screenshot_name(entry.name, viewport.name)
        screenshot_path = self.screenshots_dir / f"{name}.png"
        logger.info("Capturing: %s (%s)", entry.name, url)

        try:
            if state.needs_navigation(url):
                logger.debug("  → Navigating to %s...", url)
                await page.goto(url, wait_until="networkidle",
                                timeout=self.config.navigation_timeout)
                state = state.at(page.url)
            else:
                logger.debug("  Already on target URL")

            if entry.actions:
                logger.debug("  → Executing %d page action(s)...", len(entry.actions))
            state = await run_actions(page, entry.actions, self.config.base_url, state)

            start = time.time()
            await page.screenshot(path=str(screenshot_path), full_page=True)
            logger.info("  ✓ Screenshot saved: %s (%dms)",
                        screenshot_path.name, int((time.time() - start) * 1000))
        except Exception as e:
            logger.error("  ✗ Error capturing %s at %s: %s", name, url, e)
            raise CaptureError(name, viewport.name, url, str(e)) from e

        design = entry.design_for(viewport.name)
        result = CaptureResult(
            name=name,
            page_name=entry.name,
            viewport=viewport.name,
            url=url,
            screenshot_path=screenshot_path,
            design_image=(self.config_dir / design).resolve() if design else None,
            design_mapping_declared=bool(entry.design_images),
        )
        return result, state
