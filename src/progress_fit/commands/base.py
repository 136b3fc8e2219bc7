"""Shared CLI utilities."""

import asyncio
import logging
from functools import wraps

import click

from ..db import get_db_path
from ..db.repositories import PreferencesRepository, UserProfileRepository
from ..errors import ProgressError
from ..models.preferences import Preferences
from ..models.user_profile import UserProfile

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Send library logs to stderr, at DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def async_command(f):
    """Decorator to run async Click commands.

    Domain errors end the command with an [ERROR] line and exit code 1.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except ProgressError as e:
            echo_error(str(e))
            click.get_current_context().exit(1)

    return wrapper


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    db_path = get_db_path()
    if not db_path.exists():
        echo_error("Project not initialized. Run 'progress-fit init' first.")
        ctx.exit(1)


async def require_profile(ctx: click.Context) -> UserProfile:
    """Return the active profile or stop the command."""
    profile = await UserProfileRepository().get_latest()
    if profile is None:
        echo_error("No user profile found. Run 'progress-fit init' first.")
        ctx.exit(1)
    return profile


async def load_preferences(profile: UserProfile) -> Preferences:
    return await PreferencesRepository().get_or_default(profile.id)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row))
        )

    return "\n".join(line.rstrip() for line in lines)


def format_amount(value: float, unit: str = "") -> str:
    """Render a number without trailing zeros, plus its unit."""
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text}{unit}" if unit else text
