"""CLI commands: fsm config show | validate | init."""

from __future__ import annotations

import json
import sys

import click
from rich.console import Console

console = Console()


@click.group("config")
def config_group() -> None:
    """View, validate, and create the fsmeta user configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def config_show(as_json):
    """Display the effective configuration (file + environment + defaults)."""
    from fsmeta.core.config import _config_file_path, config_to_dict, load_config

    cfg_path = _config_file_path()
    try:
        cfg = load_config(cfg_path)
    except Exception as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(2)

    data = config_to_dict(cfg)
    data["_config_path"] = str(cfg_path)
    data["_config_exists"] = cfg_path.exists()

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        _print_config_rich(data, console)


@config_group.command("validate")
def config_validate():
    """Validate the current config file against the schema."""
    from fsmeta.core.config import _config_file_path, load_config

    cfg_path = _config_file_path()
    if not cfg_path.exists():
        console.print(f"[red]Config not found:[/red] {cfg_path}")
        sys.exit(1)

    try:
        load_config(cfg_path, required=True)
        console.print(f"[green]Config is valid:[/green] {cfg_path}")
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/red] {exc}")
        sys.exit(2)


@config_group.command("init")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file")
def config_init(force):
    """Write a config file populated with the defaults."""
    from fsmeta.core.config import FsmetaConfig, _config_file_path, config_to_dict, save_config

    cfg_path = _config_file_path()
    if cfg_path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {cfg_path}")
        console.print("Use [cyan]--force[/cyan] to overwrite.")
        sys.exit(1)

    try:
        written = save_config(config_to_dict(FsmetaConfig()), cfg_path)
    except Exception as exc:
        console.print(f"[red]Cannot write config:[/red] {exc}")
        sys.exit(2)
    console.print(f"[green]Config written:[/green] {written}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_config_rich(data, console):
    """Print config dict in a human-friendly format."""
    path = data.pop("_config_path", "unknown")
    exists = data.pop("_config_exists", False)
    suffix = "" if exists else ", not present: defaults"
    console.print(f"[bold]fsmeta Configuration[/bold]  ({path}{suffix})\n")

    for section, values in data.items():
        if isinstance(values, dict):
            console.print(f"  [cyan]\\[{section}][/cyan]")
            for k, v in values.items():
                console.print(f"    {k} = {v!r}")
        else:
            console.print(f"  {section} = {values!r}")
    console.print()
