from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from . import commands
from .config import load_config
from .formatting import DEFAULT_PATTERN

app = typer.Typer(add_completion=False)


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    commands.setup_logging(load_config(), verbose=verbose)


@app.command()
def ping() -> None:
    """
    Sanity check: config files, env wiring, and basic repo paths.
    """
    commands.cmd_ping()


@app.command("check-link")
def check_link(url: str) -> None:
    """Would this link destination be rendered as a clickable link?"""
    commands.cmd_check_link(url)


@app.command()
def render(path: Optional[Path] = typer.Argument(None, help="Markdown file (stdin when omitted)")) -> None:
    """Render Markdown to sanitized HTML."""
    commands.cmd_render(path)


@app.command()
def reltime(value: str) -> None:
    """Relative label ("3 hours ago") for a timestamp."""
    commands.cmd_reltime(value)


@app.command()
def date(
    value: str,
    pattern: str = typer.Option(DEFAULT_PATTERN, "--pattern", "-p"),
    beijing: bool = typer.Option(False, "--beijing", help="Use UTC+8 instead of the host timezone"),
) -> None:
    """Format a timestamp with a YYYY/MM/DD/HH/mm/ss pattern."""
    commands.cmd_date(value, pattern=pattern, beijing=beijing)


@app.command("beijing-parse")
def beijing_parse(text: str) -> None:
    """Parse a YYYY-MM-DDTHH:mm[:ss] value entered as UTC+8 time."""
    commands.cmd_beijing_parse(text)


@app.command("days-between")
def days_between(start: str, end: str) -> None:
    """Calendar days between two timestamps, counted in UTC+8."""
    commands.cmd_days_between(start, end)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
