"""Shared plumbing for the CLI sub-apps."""

from contextlib import contextmanager
from datetime import date
from typing import Generator, List, Optional

import typer

from hourbook.core.config import get_cli_user
from hourbook.core.dates import month_key
from hourbook.core.errors import HourbookError, TransientError
from hourbook.core.logging import get_logger
from hourbook.services import Services, create_services

logger = get_logger("hourbook.cli")

TRY_AGAIN = "The database is busy or unavailable. Please try again."


@contextmanager
def cli_services() -> Generator[Services, None, None]:
    """
    Services for one command, acting as the configured CLI user.

    Hourbook errors become a one-line message and exit code 1.
    """
    try:
        yield create_services(user_id=get_cli_user())
    except TransientError as exc:
        logger.debug("Transient failure: %s", exc)
        typer.echo(TRY_AGAIN, err=True)
        raise typer.Exit(1)
    except HourbookError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


def parse_pairs(values: List[str], name: str) -> List[tuple]:
    """Split KEY=VALUE options into (key, float) pairs."""
    pairs = []
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            typer.echo(f"Invalid {name} '{raw}', expected KEY=VALUE.", err=True)
            raise typer.Exit(1)
        try:
            pairs.append((key.strip(), float(value)))
        except ValueError:
            typer.echo(f"Invalid {name} '{raw}', value must be a number.", err=True)
            raise typer.Exit(1)
    return pairs


def parse_month(month: Optional[str]) -> str:
    """Month key for a YYYY-MM argument; this month when omitted."""
    if not month:
        return date.today().replace(day=1).isoformat()
    try:
        return month_key(month if len(month) > 7 else f"{month}-01")
    except ValueError:
        raise typer.BadParameter(f"'{month}' is not a month (YYYY-MM)")
