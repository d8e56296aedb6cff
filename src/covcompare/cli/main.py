"""covcompare CLI - compare coverage reports against a baseline."""

from pathlib import Path

import click

from covcompare.cli.compare import compare_command
from covcompare.cli.detect import detect_command
from covcompare.cli.parse import parse_command
from covcompare.config import load_config
from covcompare.core.errors import CovCompareError
from covcompare.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="covcompare")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (default: .covcompare.yaml in the current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """covcompare - Normalize coverage reports and detect regressions."""
    try:
        config = load_config(config_path=config_path)
    except CovCompareError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(detect_command, name="detect")
cli.add_command(parse_command, name="parse")
cli.add_command(compare_command, name="compare")


if __name__ == "__main__":
    cli()
