"""Comparison report generation.

The persisted report is consumed by other tooling; its JSON shape is stable:

{
    "timestamp": str,               # ISO-8601, UTC
    "baselineAlias": str,
    "baselineCommitSha": str,
    "currentCommitSha": str,
    "threshold": float,
    "format": str,                  # format of the current report
    "baseline": {"statements": {...}, "branches": {...}, "functions": {...}, "lines": {...}},
    "current": {...same...},
    "comparison": {
        "metrics": [{"metric", "baseline", "current", "delta", "status"}, ...],
        "files": [{"path", "linesDelta", "status"}, ...],
        "overallStatus": str,
        "overallDelta": float
    }
}

Each metric is {"total": int, "covered": int, "percentage": float}.
"""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from covcompare.coverage.models import (
    ComparisonStatus,
    CoverageComparison,
    CoverageFormat,
    CoverageSummary,
    FileComparison,
    MetricName,
    NormalizedCoverage,
)

log = structlog.get_logger()

_STATUS_ICON = {
    ComparisonStatus.IMPROVED: ":arrow_up:",
    ComparisonStatus.REGRESSED: ":arrow_down:",
    ComparisonStatus.UNCHANGED: ":left_right_arrow:",
}


@dataclass(frozen=True, slots=True)
class CoverageReport:
    """Everything a reporting collaborator needs about one comparison run."""

    timestamp: str
    baseline_alias: str
    baseline_commit_sha: str
    current_commit_sha: str
    threshold: float
    format: CoverageFormat
    baseline: CoverageSummary
    current: CoverageSummary
    comparison: CoverageComparison

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "baselineAlias": self.baseline_alias,
            "baselineCommitSha": self.baseline_commit_sha,
            "currentCommitSha": self.current_commit_sha,
            "threshold": self.threshold,
            "format": self.format.value,
            "baseline": self.baseline.to_dict(),
            "current": self.current.to_dict(),
            "comparison": self.comparison.to_dict(),
        }


def build_report(
    current: NormalizedCoverage,
    baseline: NormalizedCoverage,
    comparison: CoverageComparison,
    *,
    threshold: float,
    baseline_alias: str = "",
    baseline_commit_sha: str = "",
    current_commit_sha: str = "",
    timestamp: datetime | None = None,
) -> CoverageReport:
    """Assemble the persisted report record."""
    moment = timestamp or datetime.now(UTC)
    return CoverageReport(
        timestamp=moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        baseline_alias=baseline_alias,
        baseline_commit_sha=baseline_commit_sha,
        current_commit_sha=current_commit_sha,
        threshold=threshold,
        format=current.format,
        baseline=baseline.summary,
        current=current.summary,
        comparison=comparison,
    )


def write_report(report: CoverageReport, path: Path) -> Path:
    """Write the report as indented JSON, creating parent directories."""
    resolved = path.expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(json.dumps(report.to_dict(), indent=2))
    log.info("report.written", path=str(resolved))
    return resolved


def result_label(comparison: CoverageComparison) -> str:
    """Collapse the overall status into pass / fail / improved."""
    if comparison.overall_status is ComparisonStatus.REGRESSED:
        return "fail"
    if comparison.overall_status is ComparisonStatus.IMPROVED:
        return "improved"
    return "pass"


def build_outputs(current: NormalizedCoverage, comparison: CoverageComparison) -> dict[str, str]:
    """Flat key/value outputs for CI step outputs.

    Percentages and deltas are formatted to one decimal place.
    """
    outputs: dict[str, str] = {}
    for name in MetricName:
        outputs[name.value] = f"{current.summary.metric(name).percentage:.1f}"
    for name in MetricName:
        outputs[f"{name.value}-delta"] = f"{comparison.metric(name).delta:.1f}"
    outputs["result"] = result_label(comparison)
    return outputs


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_delta(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


def _file_table(title: str, files: list[FileComparison], max_files: int) -> list[str]:
    lines = [f"#### {title}", "", "| File | Δ Lines |", "|------|--------|"]
    for f in files[:max_files]:
        lines.append(f"| {f.path} | {format_delta(f.lines_delta)} |")
    if len(files) > max_files:
        lines.extend(["", f"*...and {len(files) - max_files} more files*"])
    lines.append("")
    return lines


def build_markdown_summary(report: CoverageReport, *, max_files: int = 10) -> str:
    """Render the report as a markdown summary (CI step summary / PR body).

    Args:
        report: The comparison report.
        max_files: Max files listed per regressed/improved table.
    """
    comparison = report.comparison
    overall = format_delta(comparison.overall_delta)

    md = ["## Coverage Report", ""]
    if comparison.overall_status is ComparisonStatus.IMPROVED:
        md.append(f"> :white_check_mark: Coverage improved by **{overall}** overall")
    elif comparison.overall_status is ComparisonStatus.REGRESSED:
        md.append(f"> :warning: Coverage regressed by **{overall}** overall")
    else:
        md.append("> :information_source: Coverage unchanged")
    md.append("")

    baseline_ref = f"`{report.baseline_alias}`" if report.baseline_alias else "baseline"
    if report.baseline_commit_sha:
        baseline_ref += f" @ `{report.baseline_commit_sha[:7]}`"
    md.append(f"**Baseline:** {baseline_ref}  ")
    if report.current_commit_sha:
        md.append(f"**Current:** `{report.current_commit_sha[:7]}`  ")
    md.append(f"**Threshold:** {report.threshold}%  ")
    md.append(f"**Format:** {report.format.value}")
    md.append("")

    md.extend(
        [
            "### Metrics",
            "",
            "| Metric | Baseline | Current | Delta | Status |",
            "|--------|----------|---------|-------|--------|",
        ]
    )
    for m in comparison.metrics:
        md.append(
            f"| {m.metric.value.capitalize()} | {format_percentage(m.baseline.percentage)} "
            f"| {format_percentage(m.current.percentage)} | {format_delta(m.delta)} "
            f"| {_STATUS_ICON[m.status]} {m.status.value} |"
        )
    md.append("")

    md.extend(
        [
            "### Coverage Breakdown",
            "",
            "| Metric | Covered | Total |",
            "|--------|---------|-------|",
        ]
    )
    for name in MetricName:
        metric = report.current.metric(name)
        md.append(f"| {name.value.capitalize()} | {metric.covered} | {metric.total} |")
    md.append("")

    regressed = [f for f in comparison.files if f.status is ComparisonStatus.REGRESSED]
    improved = [f for f in comparison.files if f.status is ComparisonStatus.IMPROVED]
    if regressed or improved:
        md.extend(["### Files with Coverage Changes", ""])
        if regressed:
            md.extend(_file_table("Regressed", regressed, max_files))
        if improved:
            # Most improved first
            md.extend(_file_table("Improved", improved[::-1], max_files))

    return "\n".join(md)


def build_text_summary(coverage: NormalizedCoverage) -> str:
    """Build a concise one-line summary for display contexts."""
    lines = coverage.summary.lines
    if lines.total == 0:
        return "No coverage data"
    return f"Coverage: {lines.percentage:.1f}% ({lines.covered}/{lines.total} lines)"
