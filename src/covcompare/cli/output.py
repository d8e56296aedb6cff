"""Shared console rendering for CLI commands."""

from rich.console import Console
from rich.table import Table

from covcompare.coverage import (
    ComparisonStatus,
    CoverageComparison,
    CoverageSummary,
    MetricName,
)
from covcompare.coverage.report import format_delta, format_percentage

_console = Console()

_STATUS_STYLE = {
    ComparisonStatus.IMPROVED: "green",
    ComparisonStatus.REGRESSED: "red",
    ComparisonStatus.UNCHANGED: "dim",
}


def get_console() -> Console:
    """Get the shared Rich console instance (stdout)."""
    return _console


def summary_table(summary: CoverageSummary, *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Covered", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Coverage", justify="right")
    for name in MetricName:
        metric = summary.metric(name)
        table.add_row(
            name.value.capitalize(),
            str(metric.covered),
            str(metric.total),
            format_percentage(metric.percentage),
        )
    return table


def comparison_table(comparison: CoverageComparison) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Baseline", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Delta", justify="right")
    table.add_column("Status")
    for m in comparison.metrics:
        style = _STATUS_STYLE[m.status]
        table.add_row(
            m.metric.value.capitalize(),
            format_percentage(m.baseline.percentage),
            format_percentage(m.current.percentage),
            format_delta(m.delta),
            f"[{style}]{m.status.value}[/{style}]",
        )
    return table
