"""covcompare detect command - report the format of a coverage file."""

from pathlib import Path

import click

from covcompare.core.errors import InputError
from covcompare.coverage import CoverageError, read_coverage_file
from covcompare.coverage.parsers import detect_format


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
def detect_command(path: Path) -> None:
    """Print the detected format of a coverage report.

    PATH is a coverage file, or a directory holding a well-known one.
    """
    try:
        content, filename = read_coverage_file(path)
        format_id = detect_format(content, filename)
    except CoverageError as e:
        error = InputError.from_coverage_error(e, role="input")
        raise click.ClickException(str(error)) from e
    click.echo(format_id.value)
