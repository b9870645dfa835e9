"""Shared CLI plumbing: opening the roster, login, error mapping."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

import click
from rich.console import Console

from lineal.core.auth.service import PendingRotation, Session
from lineal.core.config import LinealConfig, load_config
from lineal.core.constants import ExitCode
from lineal.core.exceptions import (
    AuthError,
    ConfigError,
    DuplicateEmail,
    LinealError,
    PermissionDenied,
    StorageUnavailable,
)
from lineal.core.logging import configure_logging
from lineal.core.roster import Roster, open_roster

_EXIT_CODES: list[tuple[type[LinealError], ExitCode]] = [
    (ConfigError, ExitCode.CONFIG_ERROR),
    (StorageUnavailable, ExitCode.STORAGE_ERROR),
    (AuthError, ExitCode.AUTH_ERROR),
    (PermissionDenied, ExitCode.PERMISSION_ERROR),
    (DuplicateEmail, ExitCode.ERROR),
]


def exit_code_for(exc: LinealError) -> ExitCode:
    for exc_type, code in _EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return ExitCode.ERROR


@contextmanager
def handle_errors(console: Console) -> Iterator[None]:
    """Print Lineal errors and exit with the matching code."""
    try:
        yield
    except LinealError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(exit_code_for(exc))


def load_cli_config() -> LinealConfig:
    config = load_config()
    configure_logging(config.logging.level, config.logging.format, config.log_path)
    return config


@contextmanager
def open_cli_roster() -> Iterator[Roster]:
    roster = open_roster(load_cli_config())
    try:
        yield roster
    finally:
        roster.close()


def prompt_password(password: str | None, label: str = "Password") -> str:
    if password is not None:
        return password
    return click.prompt(label, hide_input=True)


@contextmanager
def login_session(roster: Roster, email: str, password: str | None) -> Iterator[Session]:
    """Log in for the duration of one command; logs out afterwards."""
    result = roster.login(email, prompt_password(password))
    if isinstance(result, PendingRotation):
        raise AuthError("Password change required. Run 'lineal passwd' first.")
    try:
        yield result
    finally:
        roster.logout(result)


email_option = click.option(
    "--email", envvar="LINEAL_EMAIL", required=True, help="Login email of the acting account"
)
password_option = click.option(
    "--password",
    envvar="LINEAL_PASSWORD",
    default=None,
    help="Login password (prompted when omitted)",
)
json_option = click.option("--json", "as_json", is_flag=True, default=False)
