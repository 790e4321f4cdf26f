"""Centralized terminal output for harmatch.

Key principle: stderr for status and explanations, stdout for data (curl
commands, JSON), so ``harmatch match ... > cmd.sh`` captures only the command.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console

# stderr console for status messages
err_console = Console(stderr=True)

# stdout console for data output (JSON, tables)
out_console = Console()


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    c = console or err_console
    c.print(f"[red]  ✗ {message}[/red]")


def warn(message: str, *, console: Console | None = None) -> None:
    """Print a warning message (yellow) to stderr."""
    c = console or err_console
    c.print(f"[yellow]  ⚠ {message}[/yellow]")


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    c = console or err_console
    c.print(f"[dim]  {message}[/dim]")


def emit_json(payload: Any, *, console: Console | None = None) -> None:
    """Write ``payload`` as indented JSON to stdout, without markup or highlighting."""
    c = console or out_console
    c.print(json.dumps(payload, indent=2, ensure_ascii=False), markup=False, highlight=False, soft_wrap=True)


def emit_text(text: str, *, console: Console | None = None) -> None:
    """Write raw text (e.g. a shell command) to stdout without wrapping it."""
    c = console or out_console
    c.print(text, markup=False, highlight=False, soft_wrap=True)
