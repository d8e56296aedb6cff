"""Normalized coverage data model.

Every parser reduces its format to the same four metrics (statements,
branches, functions, lines) at report and file granularity. The comparator
only ever sees these types, so a JaCoCo baseline can be diffed against an
LCOV current report.

``to_dict()`` on each type renders the camelCase shape that the persisted
report exposes to downstream tooling. Keep those keys stable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CoverageFormat(str, Enum):
    """Supported coverage report formats."""

    LCOV = "lcov"
    ISTANBUL = "istanbul"
    COBERTURA = "cobertura"
    CLOVER = "clover"
    JACOCO = "jacoco"


class MetricName(str, Enum):
    """The four normalized metric kinds, in report order."""

    STATEMENTS = "statements"
    BRANCHES = "branches"
    FUNCTIONS = "functions"
    LINES = "lines"


class ComparisonStatus(str, Enum):
    """Three-way classification of a coverage delta."""

    IMPROVED = "improved"
    REGRESSED = "regressed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class Metric:
    """A covered/total pair with its percentage.

    An empty denominator counts as fully covered (100%) so that aggregation
    and comparison never see NaN.
    """

    total: int
    covered: int
    percentage: float

    def __post_init__(self) -> None:
        if self.total < 0 or self.covered < 0:
            raise ValueError(
                f"Metric counts must be >= 0 (covered={self.covered}, total={self.total})"
            )
        if self.covered > self.total:
            raise ValueError(f"Covered count {self.covered} exceeds total {self.total}")
        expected = self.covered / self.total * 100 if self.total > 0 else 100.0
        if not math.isclose(self.percentage, expected):
            raise ValueError(
                f"Percentage {self.percentage} does not match "
                f"{self.covered}/{self.total} ({expected})"
            )

    @classmethod
    def from_counts(cls, covered: int, total: int) -> Metric:
        percentage = covered / total * 100 if total > 0 else 100.0
        return cls(total=total, covered=covered, percentage=percentage)

    @classmethod
    def empty(cls) -> Metric:
        return cls(total=0, covered=0, percentage=100.0)

    def __add__(self, other: Metric) -> Metric:
        return Metric.from_counts(self.covered + other.covered, self.total + other.total)

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "covered": self.covered, "percentage": self.percentage}


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Aggregate coverage for an entire report."""

    statements: Metric
    branches: Metric
    functions: Metric
    lines: Metric

    def metric(self, name: MetricName) -> Metric:
        """Look up a metric by kind."""
        return getattr(self, name.value)  # type: ignore[no-any-return]

    def to_dict(self) -> dict[str, Any]:
        return {name.value: self.metric(name).to_dict() for name in MetricName}


@dataclass(frozen=True, slots=True)
class FileCoverage:
    """Coverage for one file.

    ``path`` is kept exactly as the source tool reported it.
    """

    path: str
    statements: Metric
    branches: Metric
    functions: Metric
    lines: Metric

    def metric(self, name: MetricName) -> Metric:
        return getattr(self, name.value)  # type: ignore[no-any-return]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            **{name.value: self.metric(name).to_dict() for name in MetricName},
        }


def sum_metrics(files: list[FileCoverage] | tuple[FileCoverage, ...], name: MetricName) -> Metric:
    """Sum covered/total of one metric kind across files.

    Percentages are recomputed from the summed counts, never averaged.
    """
    covered = sum(f.metric(name).covered for f in files)
    total = sum(f.metric(name).total for f in files)
    return Metric.from_counts(covered, total)


def aggregate_summary(files: list[FileCoverage] | tuple[FileCoverage, ...]) -> CoverageSummary:
    """Build a report summary by summing every file's counts."""
    return CoverageSummary(
        statements=sum_metrics(files, MetricName.STATEMENTS),
        branches=sum_metrics(files, MetricName.BRANCHES),
        functions=sum_metrics(files, MetricName.FUNCTIONS),
        lines=sum_metrics(files, MetricName.LINES),
    )


@dataclass(frozen=True, slots=True)
class NormalizedCoverage:
    """Canonical output of every parser."""

    format: CoverageFormat
    summary: CoverageSummary
    files: tuple[FileCoverage, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.value,
            "summary": self.summary.to_dict(),
            "files": [f.to_dict() for f in self.files],
        }


@dataclass(frozen=True, slots=True)
class MetricComparison:
    """Baseline vs current for one metric kind."""

    metric: MetricName
    baseline: Metric
    current: Metric
    delta: float
    status: ComparisonStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric.value,
            "baseline": self.baseline.to_dict(),
            "current": self.current.to_dict(),
            "delta": self.delta,
            "status": self.status.value,
        }


@dataclass(frozen=True, slots=True)
class FileComparison:
    """Lines-percentage delta for a file present in both reports."""

    path: str
    lines_delta: float
    status: ComparisonStatus

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "linesDelta": self.lines_delta, "status": self.status.value}


@dataclass(frozen=True, slots=True)
class CoverageComparison:
    """Structured result of comparing two normalized reports.

    ``metrics`` is always statements, branches, functions, lines in that
    order. ``files`` is sorted ascending by delta (most regressed first).
    """

    metrics: tuple[MetricComparison, ...]
    files: tuple[FileComparison, ...]
    overall_status: ComparisonStatus
    overall_delta: float

    def metric(self, name: MetricName) -> MetricComparison:
        for m in self.metrics:
            if m.metric is name:
                return m
        raise KeyError(name.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": [m.to_dict() for m in self.metrics],
            "files": [f.to_dict() for f in self.files],
            "overallStatus": self.overall_status.value,
            "overallDelta": self.overall_delta,
        }
