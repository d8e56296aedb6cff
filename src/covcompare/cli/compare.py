"""covcompare compare command - compare current coverage against a baseline."""

import json
from pathlib import Path

import click
import structlog

from covcompare.cli.output import comparison_table, get_console
from covcompare.cli.parse import FORMAT_CHOICES
from covcompare.config import CovCompareConfig
from covcompare.core.errors import CovCompareError, InputError, ReportError
from covcompare.core.logging import clear_run_id, set_run_id
from covcompare.coverage import (
    ComparisonStatus,
    CoverageError,
    NormalizedCoverage,
    build_markdown_summary,
    build_outputs,
    build_report,
    build_text_summary,
    compare_coverage,
    parse_coverage,
    read_coverage_file,
    should_fail,
    write_report,
)

log = structlog.get_logger()


def _load(path: Path, format_id: str, *, role: str) -> NormalizedCoverage:
    try:
        content, filename = read_coverage_file(path)
        return parse_coverage(content, filename, format_id)
    except CoverageError as e:
        raise InputError.from_coverage_error(e, role=role) from e


def _write_summary(markdown: str, path: Path) -> Path:
    resolved = path.expanduser().resolve()
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text(markdown + "\n")
    except OSError as e:
        raise ReportError.summary_write_failed(str(resolved), str(e)) from e
    log.info("summary.written", path=str(resolved))
    return resolved


@click.command()
@click.argument("current", type=click.Path(path_type=Path))
@click.argument("baseline", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "format_id",
    type=click.Choice(FORMAT_CHOICES),
    default=None,
    help="Format of the current report (default: from config, usually auto)",
)
@click.option(
    "--baseline-format",
    type=click.Choice(FORMAT_CHOICES),
    default=None,
    help="Format of the baseline report (default: same as --format)",
)
@click.option(
    "--threshold",
    type=click.FloatRange(0, 100),
    default=None,
    help="Percentage points a metric may drop before it counts as regressed",
)
@click.option("--report", "report_path", type=click.Path(path_type=Path), default=None)
@click.option("--summary", "summary_path", type=click.Path(path_type=Path), default=None)
@click.option("--baseline-alias", default=None, help="Label of the baseline (e.g. main)")
@click.option("--baseline-sha", default="", help="Commit SHA the baseline was recorded at")
@click.option("--current-sha", default="", help="Commit SHA of the current coverage")
@click.option(
    "--fail-on-regression/--no-fail-on-regression",
    default=None,
    help="Exit with status 1 when coverage regressed",
)
@click.option("--json", "as_json", is_flag=True, help="Output report and outputs as JSON")
@click.pass_context
def compare_command(
    ctx: click.Context,
    current: Path,
    baseline: Path,
    format_id: str | None,
    baseline_format: str | None,
    threshold: float | None,
    report_path: Path | None,
    summary_path: Path | None,
    baseline_alias: str | None,
    baseline_sha: str,
    current_sha: str,
    fail_on_regression: bool | None,
    as_json: bool,
) -> None:
    """Compare CURRENT coverage against BASELINE coverage.

    Both arguments accept a coverage file or a directory holding a
    well-known one. Writes the JSON report (and optionally a markdown
    summary) and exits with status 1 on regression.
    """
    config: CovCompareConfig = ctx.obj["config"]
    current_format = format_id or config.comparison.format
    threshold = config.comparison.threshold if threshold is None else threshold
    if fail_on_regression is None:
        fail_on_regression = config.comparison.fail_on_regression
    report_path = report_path or Path(config.report.path)
    if summary_path is None and config.report.summary_path:
        summary_path = Path(config.report.summary_path)

    set_run_id()
    try:
        current_cov = _load(current, current_format, role="current")
        baseline_cov = _load(baseline, baseline_format or current_format, role="baseline")
        comparison = compare_coverage(current_cov, baseline_cov, threshold)

        report = build_report(
            current_cov,
            baseline_cov,
            comparison,
            threshold=threshold,
            baseline_alias=baseline_alias or config.comparison.baseline_alias,
            baseline_commit_sha=baseline_sha,
            current_commit_sha=current_sha,
        )
        try:
            written = write_report(report, report_path)
        except OSError as e:
            raise ReportError.report_write_failed(str(report_path), str(e)) from e
        if summary_path is not None:
            markdown = build_markdown_summary(report, max_files=config.report.max_files)
            _write_summary(markdown, summary_path)
    except CovCompareError as e:
        log.error("compare.failed", error=e.error_name, **e.details)
        raise click.ClickException(str(e)) from e
    finally:
        clear_run_id()

    outputs = build_outputs(current_cov, comparison)
    if as_json:
        click.echo(json.dumps({"outputs": outputs, "report": report.to_dict()}, indent=2))
    else:
        console = get_console()
        console.print(comparison_table(comparison))
        console.print(build_text_summary(current_cov), highlight=False)
        for f in comparison.files:
            if f.status is ComparisonStatus.REGRESSED:
                console.print(f"[red]regressed[/red] {f.path} ({f.lines_delta:+.1f}%)")
        console.print(f"Result: {outputs['result']}  Report: {written}", highlight=False)

    if should_fail(comparison, fail_on_regression):
        ctx.exit(1)
