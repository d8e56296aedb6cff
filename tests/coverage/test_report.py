"""Tests for report generation and summaries."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from covcompare.coverage.compare import compare_coverage
from covcompare.coverage.models import (
    CoverageFormat,
    FileCoverage,
    Metric,
    NormalizedCoverage,
    aggregate_summary,
)
from covcompare.coverage.report import (
    CoverageReport,
    build_markdown_summary,
    build_outputs,
    build_report,
    build_text_summary,
    format_delta,
    result_label,
    write_report,
)


def _coverage(
    lines: tuple[tuple[str, int, int], ...], fmt: CoverageFormat = CoverageFormat.LCOV
) -> NormalizedCoverage:
    files = tuple(
        FileCoverage(
            path=path,
            statements=Metric.from_counts(covered, total),
            branches=Metric.empty(),
            functions=Metric.from_counts(1, 1),
            lines=Metric.from_counts(covered, total),
        )
        for path, covered, total in lines
    )
    return NormalizedCoverage(format=fmt, summary=aggregate_summary(files), files=files)


BASELINE = _coverage((("src/a.py", 40, 50), ("src/b.py", 10, 10)), CoverageFormat.COBERTURA)
CURRENT = _coverage((("src/a.py", 29, 50), ("src/b.py", 10, 10)))


@pytest.fixture
def report() -> CoverageReport:
    comparison = compare_coverage(CURRENT, BASELINE, threshold=1.0)
    return build_report(
        CURRENT,
        BASELINE,
        comparison,
        threshold=1.0,
        baseline_alias="main",
        baseline_commit_sha="0123456789abcdef",
        current_commit_sha="fedcba9876543210",
        timestamp=datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC),
    )


class TestBuildReport:
    """Tests for build_report and its JSON shape."""

    def test_camel_case_shape(self, report: CoverageReport) -> None:
        data = report.to_dict()
        assert list(data) == [
            "timestamp",
            "baselineAlias",
            "baselineCommitSha",
            "currentCommitSha",
            "threshold",
            "format",
            "baseline",
            "current",
            "comparison",
        ]
        assert data["timestamp"] == "2024-05-01T12:00:00.000Z"
        assert data["format"] == "lcov"
        assert data["current"]["lines"] == {"total": 60, "covered": 39, "percentage": 65.0}
        assert data["comparison"]["overallStatus"] == "regressed"

    def test_write_report_creates_parents(self, report: CoverageReport, tmp_path: Path) -> None:
        target = tmp_path / "out" / "nested" / "report.json"
        written = write_report(report, target)

        assert written == target.resolve()
        assert json.loads(target.read_text()) == report.to_dict()

    def test_default_timestamp_is_utc(self) -> None:
        comparison = compare_coverage(CURRENT, BASELINE, threshold=0.0)
        report = build_report(CURRENT, BASELINE, comparison, threshold=0.0)
        assert report.timestamp.endswith("Z")


class TestOutputs:
    """Tests for flat CI outputs."""

    def test_one_decimal_values(self, report: CoverageReport) -> None:
        outputs = build_outputs(CURRENT, report.comparison)
        assert outputs["lines"] == "65.0"
        assert outputs["lines-delta"] == "-18.3"
        assert outputs["functions"] == "100.0"
        assert outputs["functions-delta"] == "0.0"
        assert outputs["result"] == "fail"

    def test_result_labels(self) -> None:
        up = compare_coverage(BASELINE, CURRENT, threshold=0.0)
        same = compare_coverage(CURRENT, CURRENT, threshold=0.0)
        assert result_label(up) == "improved"
        assert result_label(same) == "pass"

    def test_format_delta_sign(self) -> None:
        assert format_delta(1.25) == "+1.2%"
        assert format_delta(-0.04) == "-0.0%"
        assert format_delta(0.0) == "0.0%"


class TestMarkdownSummary:
    """Tests for build_markdown_summary."""

    def test_headline_and_refs(self, report: CoverageReport) -> None:
        md = build_markdown_summary(report)
        assert md.startswith("## Coverage Report")
        assert "Coverage regressed by **-9.2%** overall" in md
        assert "**Baseline:** `main` @ `0123456`" in md
        assert "**Current:** `fedcba9`" in md
        assert "| Lines | 83.3% | 65.0% | -18.3% | :arrow_down: regressed |" in md

    def test_regressed_file_table(self, report: CoverageReport) -> None:
        md = build_markdown_summary(report)
        assert "#### Regressed" in md
        assert "| src/a.py | -22.0% |" in md
        assert "#### Improved" not in md

    def test_max_files_truncates(self) -> None:
        paths = [(f"f{i}.py", 5, 10) for i in range(4)]
        baseline = _coverage(tuple(paths))
        current = _coverage(tuple((p, 1, 10) for p, _, _ in paths))
        comparison = compare_coverage(current, baseline, threshold=0.0)
        report = build_report(current, baseline, comparison, threshold=0.0)

        md = build_markdown_summary(report, max_files=2)

        assert "*...and 2 more files*" in md

    def test_unchanged_headline(self) -> None:
        comparison = compare_coverage(CURRENT, CURRENT, threshold=0.0)
        report = build_report(CURRENT, CURRENT, comparison, threshold=0.0)
        md = build_markdown_summary(report)
        assert "Coverage unchanged" in md
        assert "Files with Coverage Changes" not in md


class TestTextSummary:
    """Tests for build_text_summary."""

    def test_lines_summary(self) -> None:
        cov = _coverage((("a.py", 39, 50),))
        assert build_text_summary(cov) == "Coverage: 78.0% (39/50 lines)"

    def test_no_data(self) -> None:
        cov = _coverage(())
        assert build_text_summary(cov) == "No coverage data"
