"""CLI commands: lineal users list | add | toggle | delete."""

from __future__ import annotations

import json
import time

import click
from rich.console import Console
from rich.table import Table

from lineal.cli._common import (
    email_option,
    handle_errors,
    json_option,
    login_session,
    open_cli_roster,
    password_option,
)
from lineal.core.models import PublicUser, Rank, Role

console = Console()


@click.group("users")
def users_group() -> None:
    """Administrative accounts (SUPER_ADMIN)."""


@users_group.command("list")
@email_option
@password_option
@json_option
def users_list(email, password, as_json):
    """List accounts (passwords are never shown)."""
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            users = roster.list_users(session)

    if as_json:
        click.echo(json.dumps([u.to_storage() for u in users], indent=2))
        return

    table = Table(title=f"Accounts ({len(users)})")
    for col in ("ID", "Email", "Name", "Rank", "Role", "Active", "Must rotate"):
        table.add_column(col)
    for u in users:
        table.add_row(
            u.id,
            u.email,
            f"{u.last_name}, {u.first_name}",
            u.rank.value,
            u.role.value,
            "yes" if u.is_active else "no",
            "yes" if u.must_change_password else "no",
        )
    console.print(table)


@users_group.command("add")
@email_option
@password_option
@click.option("--new-email", required=True, help="Login email of the new account")
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--rank", type=click.Choice([r.value for r in Rank]), default=Rank.JO1.value)
@click.option("--role", type=click.Choice([r.value for r in Role]), default=Role.ADMIN.value)
@click.option("--initial-password", envvar="LINEAL_NEW_PASSWORD", default=None)
def users_add(email, password, new_email, first_name, last_name, rank, role, initial_password):
    """Create an account; the user must change the password at first login."""
    if initial_password is None:
        initial_password = click.prompt(
            "Initial password", hide_input=True, confirmation_prompt=True
        )
    user = PublicUser(
        id=f"user-{time.time_ns() // 1_000_000}",
        first_name=first_name,
        last_name=last_name,
        email=new_email,
        rank=Rank(rank),
        role=Role(role),
    )
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            created = roster.save_user(session, user, initial_password, initial_password)
    console.print(f"[green]Created account[/green] {created.email} ({created.id}).")


@users_group.command("toggle")
@email_option
@password_option
@click.argument("user_id")
def users_toggle(email, password, user_id):
    """Enable or disable an account."""
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            updated = roster.toggle_user_status(session, user_id)
    if updated is None:
        console.print(f"[yellow]No account with id {user_id}.[/yellow]")
        return
    state = "active" if updated.is_active else "inactive"
    console.print(f"{updated.email} is now {state}.")


@users_group.command("delete")
@email_option
@password_option
@click.argument("user_id")
def users_delete(email, password, user_id):
    """Delete an account by id."""
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            roster.delete_user(session, user_id)
    console.print(f"Deleted account {user_id}.")
