"""Baseline vs current coverage comparison.

Status rule, applied per metric and per file:

- delta > 0            -> improved
- delta < -threshold   -> regressed
- otherwise            -> unchanged

Any regressed metric makes the overall status regressed. The overall delta
is the unweighted mean of the four metric deltas; it is a headline number,
not something to threshold against.
"""

import math

import structlog

from covcompare.coverage.models import (
    ComparisonStatus,
    CoverageComparison,
    FileComparison,
    Metric,
    MetricComparison,
    MetricName,
    NormalizedCoverage,
)

log = structlog.get_logger()

# File-level deltas at or below this many percentage points are rounding noise
FILE_DELTA_NOISE_FLOOR = 0.1
# Absorbs float error in differences such as 50.1 - 50.0
_FLOAT_TOLERANCE = 1e-9


def classify(delta: float, threshold: float) -> ComparisonStatus:
    """Three-way status for a percentage-point delta."""
    if delta > 0:
        return ComparisonStatus.IMPROVED
    if delta < -threshold:
        return ComparisonStatus.REGRESSED
    return ComparisonStatus.UNCHANGED


def _validate_threshold(threshold: float) -> None:
    if math.isnan(threshold) or not (0 <= threshold <= 100):
        raise ValueError(f"Threshold must be between 0 and 100, got {threshold}")


def compare_metric(
    metric: MetricName,
    baseline: Metric,
    current: Metric,
    threshold: float,
) -> MetricComparison:
    delta = current.percentage - baseline.percentage
    return MetricComparison(
        metric=metric,
        baseline=baseline,
        current=current,
        delta=delta,
        status=classify(delta, threshold),
    )


def compare_files(
    current: NormalizedCoverage,
    baseline: NormalizedCoverage,
    threshold: float,
) -> tuple[FileComparison, ...]:
    """Lines deltas for files present in both reports, most regressed first.

    Added and removed files have nothing to delta against and are skipped.
    """
    baseline_files = {f.path: f for f in baseline.files}

    comparisons: list[FileComparison] = []
    seen: set[str] = set()
    for current_file in current.files:
        if current_file.path in seen:
            continue
        seen.add(current_file.path)

        baseline_file = baseline_files.get(current_file.path)
        if baseline_file is None:
            continue

        lines_delta = current_file.lines.percentage - baseline_file.lines.percentage
        if abs(lines_delta) <= FILE_DELTA_NOISE_FLOOR + _FLOAT_TOLERANCE:
            continue

        comparisons.append(
            FileComparison(
                path=current_file.path,
                lines_delta=lines_delta,
                status=classify(lines_delta, threshold),
            )
        )

    comparisons.sort(key=lambda c: c.lines_delta)
    return tuple(comparisons)


def overall_status(metrics: tuple[MetricComparison, ...]) -> ComparisonStatus:
    """Regression on any axis dominates; then any improvement."""
    if any(m.status is ComparisonStatus.REGRESSED for m in metrics):
        return ComparisonStatus.REGRESSED
    if any(m.status is ComparisonStatus.IMPROVED for m in metrics):
        return ComparisonStatus.IMPROVED
    return ComparisonStatus.UNCHANGED


def compare_coverage(
    current: NormalizedCoverage,
    baseline: NormalizedCoverage,
    threshold: float,
) -> CoverageComparison:
    """Compare current coverage against a baseline.

    Args:
        current: Coverage of the change under test.
        baseline: Previously recorded coverage.
        threshold: Percentage points of regression tolerated per metric (0-100).

    Returns:
        CoverageComparison with metrics in statements, branches, functions,
        lines order.

    Raises:
        ValueError: If threshold is outside 0-100.
    """
    _validate_threshold(threshold)

    metrics = tuple(
        compare_metric(
            name,
            baseline.summary.metric(name),
            current.summary.metric(name),
            threshold,
        )
        for name in MetricName
    )
    overall_delta = sum(m.delta for m in metrics) / len(metrics)

    comparison = CoverageComparison(
        metrics=metrics,
        files=compare_files(current, baseline, threshold),
        overall_status=overall_status(metrics),
        overall_delta=overall_delta,
    )
    log.info(
        "coverage.compared",
        status=comparison.overall_status.value,
        overall_delta=round(overall_delta, 2),
        changed_files=len(comparison.files),
        threshold=threshold,
    )
    return comparison


def should_fail(comparison: CoverageComparison, fail_on_regression: bool = True) -> bool:
    """Whether a run should fail given the comparison result."""
    if not fail_on_regression:
        return False
    return comparison.overall_status is ComparisonStatus.REGRESSED
