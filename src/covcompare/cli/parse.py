"""covcompare parse command - normalize a single coverage report."""

import json
from pathlib import Path

import click

from covcompare.cli.output import get_console, summary_table
from covcompare.config import CovCompareConfig
from covcompare.core.errors import InputError
from covcompare.coverage import (
    AUTO,
    CoverageError,
    CoverageFormat,
    build_text_summary,
    parse_coverage,
    read_coverage_file,
)

FORMAT_CHOICES = [AUTO, *(f.value for f in CoverageFormat)]


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "format_id",
    type=click.Choice(FORMAT_CHOICES),
    default=None,
    help="Coverage format (default: from config, usually auto)",
)
@click.option("--json", "as_json", is_flag=True, help="Output normalized coverage as JSON")
@click.pass_context
def parse_command(ctx: click.Context, path: Path, format_id: str | None, as_json: bool) -> None:
    """Parse a coverage report and print its normalized summary.

    PATH is a coverage file, or a directory holding a well-known one.
    """
    config: CovCompareConfig = ctx.obj["config"]
    try:
        content, filename = read_coverage_file(path)
        coverage = parse_coverage(content, filename, format_id or config.comparison.format)
    except CoverageError as e:
        error = InputError.from_coverage_error(e, role="input")
        raise click.ClickException(str(error)) from e

    if as_json:
        click.echo(json.dumps(coverage.to_dict(), indent=2))
        return

    console = get_console()
    console.print(summary_table(coverage.summary, title=f"{filename} ({coverage.format.value})"))
    console.print(build_text_summary(coverage), highlight=False)
