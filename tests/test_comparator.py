"""Tests for the image comparator."""

from pathlib import Path

import pytest
from PIL import Image

from ux_compare.comparator.image_compare import (
    Comparator,
    classify,
    diff_percentage,
    fit_to,
)
from ux_compare.models.results import Classification


class TestDiffPercentage:
    """Tests for percentage rounding."""

    def test_rounds_to_two_decimals(self):
        assert diff_percentage(1, 3) == 33.33

    def test_tiny_difference_rounds_to_zero(self):
        """Test 17 of 1440x900 pixels rounds to 0.00%."""
        assert diff_percentage(17, 1440 * 900) == 0.0

    def test_empty_image(self):
        assert diff_percentage(0, 0) == 0.0


class TestClassify:
    """Tests for the two-tier classification."""

    def test_zero_pixels_is_match(self):
        assert classify(0, 0.0, 0.5) is Classification.MATCH

    def test_rounded_zero_with_differences_is_acceptable(self):
        """Test a nonzero pixel count is never a match, even at 0.00%."""
        assert classify(17, diff_percentage(17, 1440 * 900), 1.0) is Classification.ACCEPTABLE

    def test_at_threshold_is_acceptable(self):
        assert classify(50, 0.5, 0.5) is Classification.ACCEPTABLE

    def test_above_threshold_is_failure(self):
        assert classify(51, 0.51, 0.5) is Classification.FAILURE

    def test_zero_failure_threshold(self):
        assert classify(1, 0.01, 0.0) is Classification.FAILURE


class TestFitTo:
    """Tests for letterboxed resizing."""

    def test_letterboxes_with_white(self, png, tmp_path: Path):
        """Test a wide black design fits a tall canvas with white bands."""
        design = png(tmp_path / "design.png", (40, 20), color=(0, 0, 0))

        resized = fit_to(design, (20, 40))

        assert resized.size == (20, 40)
        assert resized.getpixel((10, 0)) == (255, 255, 255, 255)
        assert resized.getpixel((10, 39)) == (255, 255, 255, 255)
        assert resized.getpixel((10, 20))[:3] == (0, 0, 0)


class TestComparator:
    """Tests for Comparator.compare."""

    @pytest.fixture
    def comparator(self, tmp_path: Path) -> Comparator:
        return Comparator(tmp_path / "diffs", threshold=0.1, failure_threshold=1.0)

    def test_identical_images_match(self, comparator, capture_factory, png, tmp_path):
        """Test identical images match and write no diff artifact."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.screenshot_path, (20, 10))
        png(capture.design_image, (20, 10))

        outcome = comparator.compare(capture)

        assert outcome.classification is Classification.MATCH
        assert outcome.diff_pixels == 0
        assert outcome.diff_percentage == 0.0
        assert outcome.diff_path is None
        assert not (tmp_path / "diffs" / "home-desktop.diff.png").exists()
        assert comparator.warnings == []

    def test_small_difference_is_acceptable(self, comparator, capture_factory, png, tmp_path):
        """Test 1 of 400 pixels (0.25%) is within a 1% failure threshold."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.screenshot_path, (20, 20), dots=[(10, 10)])
        png(capture.design_image, (20, 20))

        outcome = comparator.compare(capture)

        assert outcome.diff_pixels == 1
        assert outcome.total_pixels == 400
        assert outcome.diff_percentage == 0.25
        assert outcome.classification is Classification.ACCEPTABLE
        assert outcome.diff_path == tmp_path / "diffs" / "home-desktop.diff.png"
        with Image.open(outcome.diff_path) as diff:
            assert diff.size == (20, 20)

    def test_large_difference_is_failure(self, comparator, capture_factory, png, tmp_path):
        """Test a half-black screenshot fails."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.design_image, (10, 10))
        img = Image.new("RGB", (10, 10), (255, 255, 255))
        for x in range(5):
            for y in range(10):
                img.putpixel((x, y), (0, 0, 0))
        capture.screenshot_path.parent.mkdir(parents=True, exist_ok=True)
        img.save(capture.screenshot_path)

        outcome = comparator.compare(capture)

        assert outcome.diff_pixels == 50
        assert outcome.diff_percentage == 50.0
        assert outcome.classification is Classification.FAILURE
        assert outcome.is_failure
        assert outcome.diff_path.exists()

    def test_sensitivity_threshold_ignores_faint_changes(self, tmp_path, capture_factory, png):
        """Test a near-identical shade is ignored at a loose pixel threshold."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.design_image, (10, 10), color=(200, 200, 200))
        png(capture.screenshot_path, (10, 10), color=(202, 202, 202))

        loose = Comparator(tmp_path / "diffs", threshold=0.5).compare(capture)
        strict = Comparator(tmp_path / "diffs", threshold=0.0).compare(capture)

        assert loose.classification is Classification.MATCH
        assert strict.diff_pixels == 100

    def test_size_mismatch_resizes_design(self, comparator, capture_factory, png, tmp_path):
        """Test mismatched sizes warn with both dimensions and still compare."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.design_image, (144, 90))
        png(capture.screenshot_path, (39, 125))

        outcome = comparator.compare(capture)

        assert outcome is not None
        assert outcome.total_pixels == 39 * 125
        assert len(comparator.warnings) == 1
        assert "144x90" in comparator.warnings[0]
        assert "39x125" in comparator.warnings[0]
        # all-white design letterboxed in white equals the all-white screenshot
        assert outcome.classification is Classification.MATCH

    def test_missing_design_reference_warns(self, comparator, capture_factory, png):
        """Test a capture without any design reference is skipped with a warning."""
        capture = capture_factory()
        png(capture.screenshot_path, (10, 10))

        assert comparator.compare(capture) is None
        assert comparator.warnings == ["No designImage for home-desktop"]

    def test_undeclared_viewport_is_silent(self, comparator, capture_factory, png):
        """Test a viewport left out of a declared mapping is skipped quietly."""
        capture = capture_factory(name="dashboard-mobile", declared=True, viewport="mobile")
        png(capture.screenshot_path, (10, 10))

        assert comparator.compare(capture) is None
        assert comparator.warnings == []

    def test_missing_design_file_warns(self, comparator, capture_factory, png, tmp_path):
        capture = capture_factory(design=tmp_path / "designs" / "gone.png")
        png(capture.screenshot_path, (10, 10))

        assert comparator.compare(capture) is None
        assert len(comparator.warnings) == 1
        assert comparator.warnings[0].startswith("Design image missing:")

    def test_compare_is_repeatable(self, comparator, capture_factory, png, tmp_path):
        """Test the same inputs give the same result every time."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.screenshot_path, (20, 20), dots=[(3, 3), (15, 4)])
        png(capture.design_image, (20, 20))

        first = comparator.compare(capture)
        second = comparator.compare(capture)

        assert first == second

    def test_compare_all_skips_unresolvable(self, comparator, capture_factory, png, tmp_path):
        """Test one warning does not stop the other comparisons."""
        good = capture_factory(name="home-desktop", design=tmp_path / "design.png")
        png(good.screenshot_path, (10, 10))
        png(good.design_image, (10, 10))
        missing = capture_factory(name="about-desktop")
        png(missing.screenshot_path, (10, 10))

        outcomes = comparator.compare_all([missing, good])

        assert [o.name for o in outcomes] == ["home-desktop"]
        assert len(comparator.warnings) == 1

    def test_unreadable_design_warns(self, comparator, capture_factory, png, tmp_path):
        """Test a corrupt design file is a warning and other comparisons still run."""
        bad_design = tmp_path / "designs" / "bad.png"
        bad_design.parent.mkdir(parents=True)
        bad_design.write_bytes(b"not a png")
        bad = capture_factory(name="bad-desktop", design=bad_design)
        png(bad.screenshot_path, (10, 10))
        good = capture_factory(name="good-desktop", design=tmp_path / "design.png")
        png(good.screenshot_path, (10, 10))
        png(good.design_image, (10, 10))

        outcomes = comparator.compare_all([bad, good])

        assert [o.name for o in outcomes] == ["good-desktop"]
        assert len(comparator.warnings) == 1
        assert comparator.warnings[0].startswith(f"Could not read design image {bad_design}")

    def test_match_removes_stale_diff(self, comparator, capture_factory, png, tmp_path):
        """Test a diff from an earlier run is removed once the capture matches."""
        capture = capture_factory(design=tmp_path / "design.png")
        png(capture.design_image, (20, 20))
        png(capture.screenshot_path, (20, 20), dots=[(2, 2), (9, 9), (17, 3)])

        first = comparator.compare(capture)
        assert first.diff_path.exists()

        png(capture.screenshot_path, (20, 20))
        second = comparator.compare(capture)

        assert second.classification is Classification.MATCH
        assert second.diff_path is None
        assert not (tmp_path / "diffs" / "home-desktop.diff.png").exists()
