"""CLI commands: lineal personnel list | save | delete."""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml
from pydantic import TypeAdapter, ValidationError
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
from lineal.core.models import Gender, Personnel, PersonnelStatus, Rank
from lineal.core.roster import PersonnelQuery

console = Console()


@click.group("personnel")
def personnel_group() -> None:
    """Personnel roster (ADMIN)."""


@personnel_group.command("list")
@email_option
@password_option
@click.option("--search", default="", help="Match last name, first name, or id")
@click.option("--rank", type=click.Choice([r.value for r in Rank]), default=None)
@click.option("--status", type=click.Choice([s.value for s in PersonnelStatus]), default=None)
@click.option("--gender", type=click.Choice([g.value for g in Gender]), default=None)
@click.option("--office", default=None, help="Exact office assignment")
@click.option("--training", default=None, help="Exact training type")
@json_option
def personnel_list(email, password, search, rank, status, gender, office, training, as_json):
    """List personnel, most senior rank first."""
    query = PersonnelQuery(
        search=search,
        rank=Rank(rank) if rank else None,
        status=PersonnelStatus(status) if status else None,
        gender=Gender(gender) if gender else None,
        office=office,
        training=training,
    )
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            rows = roster.query_personnel(session, query)

    if as_json:
        click.echo(json.dumps([p.to_storage() for p in rows], indent=2))
        return

    table = Table(title=f"Personnel ({len(rows)})")
    for col in ("ID", "Rank", "Name", "Office", "Designation", "Status", "Retires"):
        table.add_column(col)
    for p in rows:
        name = f"{p.last_name}, {p.first_name}" + (f" {p.extension}" if p.extension else "")
        table.add_row(
            p.id,
            p.rank.value,
            name,
            ", ".join(p.office_assignment),
            ", ".join(p.designation),
            p.status.value,
            p.retirement_date.isoformat(),
        )
    console.print(table)


@personnel_group.command("save")
@email_option
@password_option
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def personnel_save(email, password, source):
    """Create or update personnel from a YAML/JSON file (one record or a list)."""
    try:
        data = yaml.safe_load(source.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        console.print(f"[red]Cannot read {source}:[/red] {exc}")
        raise SystemExit(1) from exc
    if isinstance(data, dict):
        data = [data]
    try:
        records = TypeAdapter(list[Personnel]).validate_python(data)
    except ValidationError as exc:
        console.print(f"[red]Invalid personnel data in {source}:[/red]\n{exc}")
        raise SystemExit(1) from exc

    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            for record in records:
                roster.save_personnel(session, record)
    console.print(f"[green]Saved {len(records)} personnel record(s).[/green]")


@personnel_group.command("delete")
@email_option
@password_option
@click.argument("person_id")
def personnel_delete(email, password, person_id):
    """Delete a personnel record by id."""
    with handle_errors(console), open_cli_roster() as roster:
        with login_session(roster, email, password) as session:
            roster.delete_personnel(session, person_id)
    console.print(f"Deleted personnel {person_id}.")
