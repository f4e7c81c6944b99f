"""Pipeline orchestrator — coordinates capture, compare, and report stages."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from playwright.async_api import async_playwright

from ux_compare.comparator.image_compare import Comparator
from ux_compare.executor.capture import ScreenshotCapturer
from ux_compare.models.config import CompareConfig
from ux_compare.models.results import CaptureResult, RunSummary
from ux_compare.reporter.json_report import generate_json_report
from ux_compare.reporter.summary import build_summary

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates the capture → compare → report pipeline."""

    def __init__(self, config: CompareConfig, config_dir: Path):
        self.config = config
        self.config_dir = config_dir
        self.output_dir = (config_dir / config.output_dir).resolve()
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def run(self) -> RunSummary:
        """Execute the complete pipeline and return the run summary."""
        return asyncio.run(self._run_pipeline())

    async def _run_pipeline(self) -> RunSummary:
        start = time.time()
        logger.info("=== UX compare: %s (%d viewport(s), %d page(s)) ===",
                    self.config.base_url, len(self.config.viewports), len(self.config.pages))

        logger.info("--- Stage 1: Capture ---")
        stage_start = time.time()
        captures = await self._capture()
        logger.info("--- Stage 1 complete: %d screenshot(s) in %.1fs ---",
                    len(captures), time.time() - stage_start)

        logger.info("--- Stage 2: Compare ---")
        stage_start = time.time()
        comparator = Comparator(
            self.output_dir / "diffs",
            threshold=self.config.threshold,
            failure_threshold=self.config.failure_threshold,
        )
        outcomes = comparator.compare_all(captures)
        logger.info("--- Stage 2 complete: %d comparison(s) in %.1fs ---",
                    len(outcomes), time.time() - stage_start)

        summary = build_summary(
            outcomes, comparator.warnings, self.config.failure_threshold,
            duration_seconds=time.time() - start,
        )

        if self.config.report_file:
            report_path = self.output_dir / self.config.report_file
            generate_json_report(summary, report_path)
            logger.info("JSON report: %s", report_path)

        logger.info("=== Pipeline complete in %.1fs: %s ===",
                    summary.duration_seconds, summary.verdict.value.upper())
        return summary

    async def _capture(self) -> list[CaptureResult]:
        capturer = ScreenshotCapturer(self.config, self.config_dir, self.output_dir)
        first = self.config.viewports[0] if self.config.viewports else None
        scale = first.device_scale_factor if first else 1
        for viewport in self.config.viewports:
            if viewport.device_scale_factor != scale:
                logger.warning("Viewport %s asks for device scale factor %s; "
                               "the shared session uses %s",
                               viewport.name, viewport.device_scale_factor, scale)

        async with async_playwright() as p:
            logger.debug("Launching Chromium (headless=%s)...", self.config.headless)
            browser = await p.chromium.launch(headless=self.config.headless)
            try:
                context = await browser.new_context(device_scale_factor=scale)
                page = await context.new_page()
                captures, _ = await capturer.capture(page)
                await page.close()
                await context.close()
                return captures
            finally:
                await browser.close()
