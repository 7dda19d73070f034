"""Console output helpers built on click."""

from __future__ import annotations

import sys
from datetime import datetime
from typing import NoReturn

import click


def log(message: str) -> None:
    """Print a progress line prefixed with the wall-clock time."""
    stamp = click.style(datetime.now().strftime("%H:%M:%S"), fg="bright_black")
    click.echo(f"[{stamp}] {message}")


def echo(message: str) -> None:
    click.echo(message)


def success(message: str) -> None:
    click.secho(message, fg="green")


def warning(message: str) -> None:
    click.secho(message, fg="yellow")


def error(message: str) -> None:
    click.secho(f"ERROR! {message}", fg="red", err=True)


def fatal(message: str) -> NoReturn:
    """Report an unrecoverable error and terminate the process."""
    error(message)
    sys.exit(1)
