"""harmatch CLI - find the request behind a feature in a HAR capture."""

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

import harmatch
from harmatch.cli.har_commands import match_command, parse_command
from harmatch.config import get_settings
from harmatch.logging import configure_logging, get_logger

# Configure logging early using env vars directly; -v/-vv and --log-format
# in main_callback() may reconfigure later.
configure_logging(
    level=os.environ.get("HARMATCH_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("HARMATCH_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="harmatch",
    help="""
    harmatch - find the request behind a feature in a HAR capture

    \b
    Quick start:
      harmatch parse capture.har                   List the API requests
      harmatch match capture.har "add to cart"     Print the matching request as curl
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
) -> None:
    """harmatch - find the request behind a feature in a HAR capture."""
    settings = get_settings()
    json_output = (log_format or settings.log_format) == "json"

    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)
    elif log_format is not None:
        configure_logging(level=settings.log_level, json_output=json_output)


@app.command("version")
def version() -> None:
    """Show harmatch version and active configuration."""
    settings = get_settings()
    key_state = "[green]configured[/green]" if settings.openai_api_key else "[red]missing[/red]"
    console.print(
        Panel(
            f"[bold cyan]harmatch[/bold cyan] v{harmatch.__version__}\n\n"
            f"[dim]Model:[/dim]   {settings.openai_model}\n"
            f"[dim]API key:[/dim] {key_state}\n"
            f"[dim]Budget:[/dim]  {settings.max_payload_chars} chars per call",
            title="Find the request behind a feature",
            border_style="cyan",
        )
    )


app.command("parse")(parse_command)
app.command("match")(match_command)


if __name__ == "__main__":
    app()
