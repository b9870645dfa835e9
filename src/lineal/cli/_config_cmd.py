"""CLI commands: lineal config show | validate | path."""

from __future__ import annotations

import json
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lineal.cli._common import handle_errors

console = Console()


@click.group("config")
def config_group() -> None:
    """Inspect and check the Lineal configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.option("--redact/--no-redact", default=True, help="Mask the seed password (default: mask)")
def config_show(as_json: bool, redact: bool) -> None:
    """Display the effective configuration (defaults, file, environment)."""
    from lineal.core.config import load_config

    with handle_errors(console):
        cfg = load_config()

    sections = cfg.model_dump(mode="json")
    sections["storage"]["resolved_path"] = str(cfg.storage_path)
    if not redact:
        sections["seed"]["default_password"] = cfg.seed.default_password.get_secret_value()

    if as_json:
        click.echo(json.dumps({"path": str(cfg._config_path), **sections}, indent=2))
        return

    exists = cfg._config_path is not None and cfg._config_path.exists()
    source = str(cfg._config_path) if exists else f"{cfg._config_path} (not present, defaults)"
    console.print(f"[bold]Lineal configuration[/bold]  {source}")
    for name, values in sections.items():
        if isinstance(values, dict):
            console.print(_section_table(name, values))


@config_group.command("validate")
def config_validate() -> None:
    """Check the config file, the seed document it names, and the storage location."""
    from lineal.core.config import _config_file_path, load_config
    from lineal.core.seed import load_seed

    with handle_errors(console):
        cfg = load_config(_config_file_path(), required=True)
        if cfg.seed.personnel_file:
            seed = load_seed(cfg.seed.personnel_file)
            console.print(
                f"  seed file ok: {len(seed.personnel)} personnel, "
                f"accounts {seed.super_admin.email}, {seed.admin.email}"
            )

    target = cfg.storage_path
    if cfg.storage.backend != "memory" and not (target if target.is_dir() else target.parent).exists():
        console.print(f"[yellow]Storage location does not exist yet:[/yellow] {target}")
    console.print(f"[green]Config is valid:[/green] {cfg._config_path}")


@config_group.command("path")
def config_path() -> None:
    """Print the config file location."""
    from lineal.core.config import _config_file_path

    click.echo(str(_config_file_path()))


def _section_table(name: str, values: dict[str, Any]) -> Table:
    table = Table(title=escape(f"[{name}]"), title_justify="left", show_header=False, box=None)
    table.add_column("key", style="cyan")
    table.add_column("value")
    for key, value in values.items():
        table.add_row(key, repr(value))
    return table
