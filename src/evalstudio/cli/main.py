"""evalstudio CLI entry point."""

from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from evalstudio import __version__
from evalstudio.cli.dataset_cmd import dataset_app
from evalstudio.cli.report_cmd import compare
from evalstudio.cli.report_cmd import report as report_cmd
from evalstudio.cli.run_cmd import run
from evalstudio.logging_config import configure_logging
from evalstudio.models.config import load_project_config

app = typer.Typer(
    name="evalstudio",
    help="Datasets, evaluators and scored runs for agent flows",
    no_args_is_help=True,
)

# Register subcommands
app.add_typer(dataset_app, name="dataset")
app.command()(run)
app.command(name="report")(report_cmd)
app.command()(compare)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"evalstudio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="console or json (default: from evalstudio.yaml)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="debug, info, warning or error (default: from evalstudio.yaml)"
    ),
) -> None:
    """Datasets, evaluators and scored runs for agent flows."""
    try:
        config = load_project_config()
    except (ValidationError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Invalid evalstudio.yaml: {exc}") from exc
    try:
        configure_logging(log_format or config.log_format, log_level or config.log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
