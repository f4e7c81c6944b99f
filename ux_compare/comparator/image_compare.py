"""Image comparison — screenshot vs design reference with pixelmatch."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps
from pixelmatch.contrib.PIL import pixelmatch

from ux_compare.models.results import CaptureResult, Classification, ComparisonOutcome

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255, 255)


def load_image(path: Path) -> Image.Image:
    with Image.open(path) as img:
        return img.convert("RGBA")


def fit_to(design_path: Path, size: tuple[int, int]) -> Image.Image:
    """Scale the design to ``size`` keeping its aspect ratio, letterboxed in white."""
    return ImageOps.pad(
        load_image(design_path), size, method=Image.Resampling.LANCZOS, color=WHITE,
    )


def diff_percentage(diff_pixels: int, total_pixels: int) -> float:
    if total_pixels == 0:
        return 0.0
    return round(diff_pixels / total_pixels * 100, 2)


def classify(diff_pixels: int, percentage: float, failure_threshold: float) -> Classification:
    """Zero differing pixels is a match; otherwise the rounded percentage decides."""
    if diff_pixels == 0:
        return Classification.MATCH
    if percentage <= failure_threshold:
        return Classification.ACCEPTABLE
    return Classification.FAILURE


class Comparator:
    """Compares captures against their design images and collects warnings.

    Missing references and size mismatches are recorded in ``warnings`` and
    never raise; each comparison is independent of the others.
    """

    def __init__(self, diffs_dir: Path, threshold: float = 0.1, failure_threshold: float = 0.5):
        self.diffs_dir = diffs_dir
        self.diffs_dir.mkdir(parents=True, exist_ok=True)
        self.threshold = threshold
        self.failure_threshold = failure_threshold
        self.warnings: list[str] = []

    def compare_all(self, captures: list[CaptureResult]) -> list[ComparisonOutcome]:
        logger.info("Comparing images (pixel threshold %s, failure threshold %s%%)",
                    self.threshold, self.failure_threshold)
        outcomes = []
        for capture in captures:
            outcome = self.compare(capture)
            if outcome is not None:
                outcomes.append(outcome)
        return outcomes

    def compare(self, capture: CaptureResult) -> ComparisonOutcome | None:
        """Compare one capture. Returns None when there is nothing to compare against."""
        logger.info("Comparing: %s", capture.name)
        design_path = capture.design_image
        if design_path is None:
            if capture.design_mapping_declared:
                logger.debug("  No design image declared for viewport %s, skipping",
                             capture.viewport)
            else:
                self._warn(f"No designImage for {capture.name}")
            return None
        if not design_path.exists():
            self._warn(f"Design image missing: {design_path}")
            return None

        screenshot = load_image(capture.screenshot_path)
        try:
            design = load_image(design_path)
        except (OSError, ValueError) as e:
            self._warn(f"Could not read design image {design_path}: {e}")
            return None
        logger.debug("  Design: %s (%dx%d)", design_path.name, design.width, design.height)
        logger.debug("  Screenshot: %s (%dx%d)", capture.screenshot_path.name,
                     screenshot.width, screenshot.height)

        if design.size != screenshot.size:
            self._warn(
                f"Size mismatch for {capture.name} "
                f"(design: {design.width}x{design.height}, "
                f"screenshot: {screenshot.width}x{screenshot.height}), "
                f"resizing design to match screenshot..."
            )
            design = fit_to(design_path, screenshot.size)

        diff = Image.new("RGBA", screenshot.size)
        diff_pixels = pixelmatch(design, screenshot, diff, threshold=self.threshold)
        total_pixels = screenshot.width * screenshot.height
        percentage = diff_percentage(diff_pixels, total_pixels)
        classification = classify(diff_pixels, percentage, self.failure_threshold)

        diff_path = self.diffs_dir / f"{capture.name}.diff.png"
        if diff_pixels > 0:
            diff.save(diff_path)
        else:
            # a diff left by an earlier run into the same output dir is stale
            diff_path.unlink(missing_ok=True)
            diff_path = None

        self._log_outcome(capture.name, classification, diff_pixels, total_pixels, percentage)
        return ComparisonOutcome(
            name=capture.name,
            diff_pixels=diff_pixels,
            total_pixels=total_pixels,
            diff_percentage=percentage,
            classification=classification,
            diff_path=diff_path,
        )

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning("  ⚠ %s", message)

    def _log_outcome(
        self, name: str, classification: Classification,
        diff_pixels: int, total_pixels: int, percentage: float,
    ) -> None:
        if classification is Classification.MATCH:
            logger.info("  ✅ MATCH: %s pixels identical (0.00%% difference)", f"{total_pixels:,}")
        elif classification is Classification.ACCEPTABLE:
            logger.info("  ⚠️  ACCEPTABLE: %s of %s pixels different (%.2f%%), within %s%%",
                        f"{diff_pixels:,}", f"{total_pixels:,}", percentage,
                        self.failure_threshold)
        else:
            logger.info("  ❌ FAILURE: %s of %s pixels different (%.2f%%), exceeds %s%%",
                        f"{diff_pixels:,}", f"{total_pixels:,}", percentage,
                        self.failure_threshold)
