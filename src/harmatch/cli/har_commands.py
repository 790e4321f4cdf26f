"""CLI commands for listing HAR candidates and matching a description to one."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from harmatch import console as hm_console
from harmatch.config import get_settings
from harmatch.exceptions import (
    HARParseError,
    InvalidInputError,
    OracleRequestError,
    OracleUnavailableError,
)
from harmatch.har.parser import load_json_file
from harmatch.har.reducer import CandidateRequest
from harmatch.logging import get_logger
from harmatch.service import ParseHarResult, load_candidates, match_request, parse_har

LOG = get_logger(__name__)

EXIT_INVALID_INPUT = 2
EXIT_ORACLE_UNAVAILABLE = 3
EXIT_ORACLE_FAILED = 4

HarFileArgument = Annotated[
    Path,
    typer.Argument(
        help="HAR file exported from browser developer tools",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for scripting"),
]


def _load_har(har_file: Path) -> ParseHarResult:
    """Parse a HAR file, exiting with an input error if it is unusable."""
    try:
        data = load_json_file(har_file, max_bytes=get_settings().max_har_bytes)
        result = parse_har(data)
    except HARParseError as exc:
        hm_console.error(f"Invalid input: {exc}")
        raise typer.Exit(EXIT_INVALID_INPUT) from None

    if result.errors:
        hm_console.warn(f"{len(result.errors)} entries failed to parse and were skipped")
        for err in result.errors[:3]:
            hm_console.info(f"Entry {err.index}: {err.error}")
    return result


def _load_match_input(path: Path) -> list[CandidateRequest]:
    """Load candidates from a HAR file or from the JSON written by ``parse --json``."""
    try:
        data: Any = load_json_file(path, max_bytes=get_settings().max_har_bytes)
        if isinstance(data, dict) and "log" in data:
            return parse_har(data).entries
        if isinstance(data, dict) and "entries" in data:
            return load_candidates(data["entries"])
        return load_candidates(data)
    except InvalidInputError as exc:
        hm_console.error(f"Invalid input: {exc}")
        raise typer.Exit(EXIT_INVALID_INPUT) from None


def parse_command(har_file: HarFileArgument, json_output: JsonOption = False) -> None:
    """List the API requests found in a HAR file.

    HTML page loads are skipped and repeated captures of the same request are
    shown once. Indices shown here are the ones ``match`` reports.

    \b
    Examples:
        harmatch parse capture.har
        harmatch parse capture.har --json > requests.json
    """
    result = _load_har(har_file)

    if json_output:
        hm_console.emit_json(result.to_dict())
        return

    if not result.entries:
        hm_console.warn("No API requests found in HAR file")
        return

    table = Table(
        title=f"API Requests ({result.count} found)",
        title_style="bold",
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Method", style="cyan", no_wrap=True, width=8)
    table.add_column("Status", justify="right")
    table.add_column("URL", style="white", overflow="fold")

    for index, entry in enumerate(result.entries):
        status = "[dim]n/a[/dim]" if entry.status is None else str(entry.status)
        table.add_row(str(index), escape(entry.method), status, escape(entry.url))

    hm_console.out_console.print(table)


def match_command(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="HAR file, or JSON saved from 'harmatch parse --json'",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    description: Annotated[str, typer.Argument(help="What the wanted request does, in plain words")],
    json_output: JsonOption = False,
) -> None:
    """Find the request that implements DESCRIPTION and print it as curl.

    The curl command goes to stdout; confidence and reasons go to stderr.

    \b
    Examples:
        harmatch match capture.har "add item to cart"
        harmatch match requests.json "search products" --json
    """
    candidates = _load_match_input(input_file)
    if not json_output:
        hm_console.info(f"Matching against {len(candidates)} requests...")

    try:
        result = match_request(description, candidates)
    except InvalidInputError as exc:
        hm_console.error(f"Invalid input: {exc}")
        raise typer.Exit(EXIT_INVALID_INPUT) from None
    except OracleUnavailableError as exc:
        hm_console.error(f"Matching service unavailable: {exc}")
        raise typer.Exit(EXIT_ORACLE_UNAVAILABLE) from None
    except OracleRequestError as exc:
        hm_console.error(f"Matching service failed, try again: {exc}")
        raise typer.Exit(EXIT_ORACLE_FAILED) from None

    if json_output:
        hm_console.emit_json(result.to_dict())
        return

    if not result.matched:
        hm_console.warn("No request matching the description was found")
        return

    request = candidates[result.matched_index]
    reasons = "\n".join(f"• {escape(bullet)}" for bullet in result.explanation_bullets) or "[dim]no reasons given[/dim]"
    hm_console.err_console.print(
        Panel(
            f"[bold]#{result.matched_index}[/bold] {escape(request.method)} {escape(request.url)}\n\n{reasons}",
            title=f"[green]Match[/green] [dim](confidence: {result.confidence or 'unknown'})[/dim]",
            border_style="green",
        )
    )
    hm_console.emit_text(result.curl)
