"""Coverage report parsing and baseline comparison.

This package provides:
- Multi-format coverage parsing (5 formats) into one normalized model
- Baseline vs current comparison with regression classification
- A stable JSON report plus markdown/text summaries

Usage:
    from covcompare.coverage import parse_coverage, compare_coverage

    current = parse_coverage(content, "lcov.info")
    baseline = parse_coverage(baseline_content, "coverage.xml", "cobertura")
    comparison = compare_coverage(current, baseline, threshold=1.0)

Supported formats:
    - lcov: pytest-cov, c8, gcov/lcov, cargo-llvm-cov
    - istanbul: Jest, Vitest, NYC (coverage-final.json)
    - cobertura: coverage.py, coverlet (.NET)
    - clover: PHP (PHPUnit), Kotlin (kover)
    - jacoco: Java (Maven/Gradle)
"""

from covcompare.coverage.compare import compare_coverage, should_fail
from covcompare.coverage.errors import (
    CoverageError,
    CoverageFileNotFoundError,
    EmptyCoverageDataError,
    InvalidFormatError,
    MalformedInputError,
    UnrecognizedFormatError,
)
from covcompare.coverage.files import read_coverage_file, resolve_coverage_path
from covcompare.coverage.models import (
    ComparisonStatus,
    CoverageComparison,
    CoverageFormat,
    CoverageSummary,
    FileComparison,
    FileCoverage,
    Metric,
    MetricComparison,
    MetricName,
    NormalizedCoverage,
)
from covcompare.coverage.parsers import (
    AUTO,
    PARSER_BY_FORMAT,
    CoverageParser,
    detect_format,
    get_parser,
    parse_coverage,
)
from covcompare.coverage.report import (
    CoverageReport,
    build_markdown_summary,
    build_outputs,
    build_report,
    build_text_summary,
    write_report,
)

__all__ = [
    # Models
    "ComparisonStatus",
    "CoverageComparison",
    "CoverageFormat",
    "CoverageSummary",
    "FileComparison",
    "FileCoverage",
    "Metric",
    "MetricComparison",
    "MetricName",
    "NormalizedCoverage",
    # Errors
    "CoverageError",
    "CoverageFileNotFoundError",
    "EmptyCoverageDataError",
    "InvalidFormatError",
    "MalformedInputError",
    "UnrecognizedFormatError",
    # Parsers
    "AUTO",
    "CoverageParser",
    "PARSER_BY_FORMAT",
    "detect_format",
    "get_parser",
    "parse_coverage",
    # Files
    "read_coverage_file",
    "resolve_coverage_path",
    # Compare
    "compare_coverage",
    "should_fail",
    # Report
    "CoverageReport",
    "build_markdown_summary",
    "build_outputs",
    "build_report",
    "build_text_summary",
    "write_report",
]
