"""
Lineal CLI entry point.

Commands:
  lineal init                  — create the store and seed default accounts
  lineal passwd                — change your password (or complete a forced rotation)
  lineal personnel list|save|delete
  lineal users list|add|toggle|delete
  lineal logs show|clear
  lineal config show|validate|path
  lineal db info
  lineal version               — show version information
"""

from __future__ import annotations

import click
from rich.console import Console

from lineal import __version__
from lineal.cli._common import (
    email_option,
    handle_errors,
    load_cli_config,
    open_cli_roster,
    prompt_password,
)
from lineal.cli._config_cmd import config_group
from lineal.cli._db import db_group
from lineal.cli._logs import logs_group
from lineal.cli._personnel import personnel_group
from lineal.cli._users import users_group

console = Console()


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="lineal %(version)s")
def cli() -> None:
    """Lineal — personnel lineal-roster manager with an audit trail."""


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command()
def init() -> None:
    """Create the config file and store, then seed the default accounts and starter roster."""
    from lineal.core.config import _config_file_path, save_config
    from lineal.core.roster import build_roster, run_bootstrap, seed_from_config
    from lineal.core.store import RecordStore, open_backend

    with handle_errors(console):
        config = load_cli_config()
        cfg_path = _config_file_path()
        if not cfg_path.exists():
            save_config(config, cfg_path)
            console.print(f"[bold]Config[/bold]:  wrote {cfg_path}")
        backend = open_backend(config.storage.backend, config.storage_path)
        roster = build_roster(RecordStore(backend), max_entries=config.audit.max_entries)
        try:
            password = config.seed.default_password.get_secret_value()
            report = run_bootstrap(roster, seed_from_config(config), password)
        finally:
            roster.close()

    console.print(f"[bold]Storage[/bold]: {backend.describe()}")
    if not report.changed:
        console.print("[dim]Already initialised; nothing to do.[/dim]")
        return
    for email in report.users_created:
        console.print(f"  [green]created[/green] {email} (password change required at first login)")
    if report.personnel_seeded:
        console.print(f"  [green]seeded[/green]  {report.personnel_seeded} personnel record(s)")


# ---------------------------------------------------------------------------
# passwd
# ---------------------------------------------------------------------------


@cli.command()
@email_option
@click.option("--password", envvar="LINEAL_PASSWORD", default=None, help="Current password")
@click.option(
    "--new-password",
    envvar="LINEAL_NEW_PASSWORD",
    default=None,
    help="New password (prompted with confirmation when omitted)",
)
def passwd(email: str, password: str | None, new_password: str | None) -> None:
    """Change your password; required after the first login."""
    from lineal.core.auth.service import PendingRotation

    with handle_errors(console), open_cli_roster() as roster:
        result = roster.login(email, prompt_password(password, "Current password"))
        if new_password is not None:
            confirm = new_password
        else:
            new_password = click.prompt("New password", hide_input=True)
            confirm = click.prompt("Confirm new password", hide_input=True)

        if isinstance(result, PendingRotation):
            roster.logout(roster.complete_rotation(result, new_password, confirm))
        else:
            try:
                roster.update_self(result, password=new_password, confirm_password=confirm)
            finally:
                roster.logout(result)

    console.print("[green]Password updated.[/green]")


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show version information."""
    import platform
    import sys

    if as_json:
        import json

        click.echo(
            json.dumps(
                {
                    "lineal": __version__,
                    "python": sys.version.split()[0],
                    "platform": sys.platform,
                    "arch": platform.machine(),
                },
                indent=2,
            )
        )
    else:
        console.print(f"lineal {__version__}")
        console.print(f"Python {sys.version.split()[0]}")
        console.print(f"Platform: {sys.platform} {platform.machine()}")


cli.add_command(personnel_group)
cli.add_command(users_group)
cli.add_command(logs_group)
cli.add_command(config_group)
cli.add_command(db_group)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
