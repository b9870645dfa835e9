"""CLI commands: lineal logs show | clear."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape

from lineal.cli._common import (
    email_option,
    handle_errors,
    json_option,
    login_session,
    open_cli_roster,
    password_option,
)

console = Console()


@click.group("logs")
def logs_group() -> None:
    """Audit log (SUPER_ADMIN)."""


@logs_group.command("show")
@email_option
@password_option
@click.option("--search", default="", help="Case-insensitive match on action, details, or user")
@click.option("--limit", default=50, show_default=True, help="Number of entries to show")
@json_option
def logs_show(email, password, search, limit, as_json):
    """Show audit entries, newest first."""
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            entries = (
                roster.search_logs(session, search) if search else roster.list_logs(session)
            )
    entries = entries[:limit]

    if as_json:
        click.echo(json.dumps([e.to_storage() for e in entries], indent=2, ensure_ascii=False))
        return

    if not entries:
        console.print("[dim]No audit entries.[/dim]")
        return
    for e in entries:
        ts = e.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        console.print(
            f"[dim]{ts}[/dim]  [cyan]{escape(e.action):<12}[/cyan] "
            f"{escape(e.performed_by):<28} {escape(e.details)}",
            highlight=False,
        )


@logs_group.command("clear")
@email_option
@password_option
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
def logs_clear(email, password, yes):
    """Erase the audit log (a SYSTEM entry records the erasure)."""
    if not yes:
        click.confirm(
            "Clear all system audit logs? This action cannot be undone.", abort=True
        )
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            roster.clear_logs(session)
    console.print("[green]Audit log cleared.[/green]")
