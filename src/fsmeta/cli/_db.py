"""Repository creation, inspection and removal CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.pretty import Pretty

from fsmeta.cli._common import handle_errors
from fsmeta.core.constants import StorageFormat

console = Console()

_FORMAT_CHOICE = click.Choice([f.value for f in StorageFormat])


@click.group()
def db_group() -> None:
    """Repository creation, inspection and removal."""


@db_group.command("init")
@click.option(
    "--format", "fmt", type=_FORMAT_CHOICE, default=None,
    help="State file format (default: json, or storage.default_format from config)",
)
@click.argument(
    "directory", required=False, type=click.Path(file_okay=False, path_type=Path)
)
@click.pass_obj
@handle_errors
def db_init(config, fmt: str | None, directory: Path | None) -> None:
    """Create a repository in DIRECTORY (default: the current directory)."""
    from fsmeta.core.constants import DEFAULT_FORMAT
    from fsmeta.core.store.persist import init_repository

    if fmt is not None:
        storage_format = StorageFormat(fmt)
    elif config is not None:
        storage_format = config.storage.default_format
    else:
        storage_format = DEFAULT_FORMAT

    target = directory or Path.cwd()
    if not target.is_dir():
        raise click.BadParameter(f"not a directory: {target}", param_hint="DIRECTORY")

    handle = init_repository(target, storage_format)
    console.print(
        f"[green]Initialized {storage_format.value} repository[/green] in {handle.marker}"
    )


@db_group.command("info")
@click.option("--json", "as_json", is_flag=True, default=False)
@handle_errors
def db_info(as_json: bool) -> None:
    """Show repository root, format, state file and counts."""
    from fsmeta.core.store.persist import open_repository

    with open_repository() as repo:
        handle = repo.handle
        state = repo.state
        info = {
            "root": str(handle.root),
            "format": handle.format.value,
            "state_file": str(handle.state_path),
            "size_kb": round(handle.state_path.stat().st_size / 1024, 1),
            "entries": len(state.entries),
            "collections": len(state.collections),
            "root_tags": len(state.root.tags),
            "created": state.created.isoformat(),
            "updated": state.updated.isoformat() if state.updated else None,
        }

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    console.print(f"[bold]Repository[/bold]: {info['root']}")
    console.print(f"Format: {info['format']}")
    console.print(f"State file: {info['state_file']} ({info['size_kb']:.1f} KB)")
    console.print(f"Entries: {info['entries']}")
    console.print(f"Collections: {info['collections']}")
    console.print(f"Repository tags: {info['root_tags']}")


@db_group.command("dump")
@click.option("--json", "as_json", is_flag=True, default=False, help="Dump as JSON")
@click.option("--pretty", is_flag=True, default=False, help="Indent the output")
@handle_errors
def db_dump(as_json: bool, pretty: bool) -> None:
    """Write the whole repository to stdout."""
    from fsmeta.core.store import codecs
    from fsmeta.core.store.persist import open_repository

    with open_repository() as repo:
        state = repo.state

    if as_json:
        fmt = StorageFormat.JSON_PRETTY if pretty else StorageFormat.JSON
        click.echo(codecs.encode(state, fmt).decode("utf-8").rstrip("\n"))
    elif pretty:
        console.print(Pretty(state, expand_all=True))
    else:
        console.print(Pretty(state))


@db_group.command("drop")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation")
@handle_errors
def db_drop(yes: bool) -> None:
    """Delete the repository's state file and .fsm directory."""
    from fsmeta.core.root import require_root
    from fsmeta.core.store.persist import drop_repository

    handle = require_root(Path.cwd())
    if not yes:
        click.confirm(f"Delete all metadata in {handle.root}?", abort=True)
    drop_repository(handle)
    console.print(f"Dropped repository at {handle.root}")
