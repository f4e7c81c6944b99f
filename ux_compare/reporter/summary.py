"""Run summary aggregation and the process-level verdict."""

from __future__ import annotations

from ux_compare.models.results import Classification, ComparisonOutcome, RunSummary, Verdict


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def build_summary(
    outcomes: list[ComparisonOutcome],
    warnings: list[str],
    failure_threshold: float,
    duration_seconds: float = 0.0,
) -> RunSummary:
    """Aggregate outcomes. Any failure fails the run; warnings never do."""
    percentages = [o.diff_percentage for o in outcomes]
    failures = [o for o in outcomes if o.classification is Classification.FAILURE]
    acceptable = [o for o in outcomes if o.classification is Classification.ACCEPTABLE]

    return RunSummary(
        total=len(outcomes),
        matches=sum(1 for o in outcomes if o.classification is Classification.MATCH),
        acceptable=len(acceptable),
        failures=len(failures),
        average_diff=_mean(percentages),
        max_diff=max(percentages, default=0.0),
        average_failure_diff=_mean([o.diff_percentage for o in failures]),
        average_acceptable_diff=_mean([o.diff_percentage for o in acceptable]),
        failure_threshold=failure_threshold,
        duration_seconds=round(duration_seconds, 2),
        verdict=Verdict.FAIL if failures else Verdict.PASS,
        warnings=list(warnings),
        outcomes=list(outcomes),
    )
