"""Storage inspection CLI commands."""

from __future__ import annotations

import json

import click
from rich.console import Console

from lineal.cli._common import handle_errors, load_cli_config

console = Console()


@click.group("db")
def db_group() -> None:
    """Storage inspection."""


@db_group.command("info")
@click.option("--json", "as_json", is_flag=True, default=False)
def db_info(as_json: bool) -> None:
    """Show backend, path, and per-collection record counts."""
    from lineal.core.store import RecordStore, open_backend

    with handle_errors(console):
        config = load_cli_config()
        with RecordStore(open_backend(config.storage.backend, config.storage_path)) as store:
            collections = {}
            for repo in (store.users, store.personnel, store.audit_entries):
                blob = store.backend.read(repo.key)
                collections[repo.key] = {
                    "records": repo.count(),
                    "bytes": len(blob) if blob else 0,
                }
            description = store.backend.describe()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "backend": config.storage.backend,
                    "path": str(config.storage_path),
                    "collections": collections,
                },
                indent=2,
            )
        )
        return

    console.print(f"[bold]Storage[/bold]: {description}")
    console.print("\nCollections:")
    for key, stats in collections.items():
        console.print(f"  {key:<12} {stats['records']:>6} record(s)  {stats['bytes']:>8} bytes")
