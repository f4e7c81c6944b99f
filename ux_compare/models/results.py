"""Result data structures produced by capture, comparison and reporting."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Classification(str, Enum):
    MATCH = "match"
    ACCEPTABLE = "acceptable"
    FAILURE = "failure"


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class CaptureResult(BaseModel):
    """One screenshot for a page at a viewport, paired with its design reference."""

    model_config = ConfigDict(frozen=True)

    name: str  # normalized "{page}-{viewport}"
    page_name: str
    viewport: str
    url: str
    screenshot_path: Path
    design_image: Optional[Path] = None
    # True when the page declares per-viewport designs, even if not for this viewport
    design_mapping_declared: bool = False


class ComparisonOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    diff_pixels: int
    total_pixels: int
    diff_percentage: float  # rounded to 2 decimals
    classification: Classification
    diff_path: Optional[Path] = None

    @property
    def is_failure(self) -> bool:
        return self.classification is Classification.FAILURE


class RunSummary(BaseModel):
    total: int = 0
    matches: int = 0
    acceptable: int = 0
    failures: int = 0
    average_diff: float = 0.0
    max_diff: float = 0.0
    average_failure_diff: float = 0.0
    average_acceptable_diff: float = 0.0
    failure_threshold: float = 0.5
    duration_seconds: float = 0.0
    verdict: Verdict = Verdict.PASS
    warnings: list[str] = Field(default_factory=list)
    outcomes: list[ComparisonOutcome] = Field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.verdict is Verdict.PASS else 1
