"""Collection management CLI commands."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape

from fsmeta.cli._common import handle_errors

console = Console()


@click.group()
def coll_group() -> None:
    """Named, ordered collections of paths."""


@coll_group.command("create")
@click.argument("name")
@handle_errors
def coll_create(name: str) -> None:
    """Create an empty collection."""
    from fsmeta.core.store.persist import open_repository

    with open_repository(write=True) as repo:
        repo.create_collection(name)
    console.print(f"Created collection [cyan]{escape(name)}[/cyan]")


@coll_group.command("delete")
@click.argument("name")
@click.option("--files", "-f", is_flag=True, default=False, help="List the removed members")
@handle_errors
def coll_delete(name: str, files: bool) -> None:
    """Delete a collection. Entries of its members are kept."""
    from fsmeta.core.store.persist import open_repository

    with open_repository(write=True) as repo:
        members = repo.delete_collection(name)
    console.print(f"Deleted collection [cyan]{escape(name)}[/cyan]")
    if files:
        console.print(f"{len(members)} files")
        for member in members:
            console.print(escape(member))


@coll_group.command("push")
@click.argument("name")
@click.argument("paths", nargs=-1, required=True, type=click.Path())
@handle_errors
def coll_push(name: str, paths: tuple[str, ...]) -> None:
    """Append PATHS to collection NAME (existing members are skipped)."""
    from fsmeta.core.store.persist import open_repository

    with open_repository(write=True) as repo:
        added = repo.push(name, *paths)
    console.print(f"Added {len(added)} to [cyan]{escape(name)}[/cyan]")


@coll_group.command("pop")
@click.argument("name")
@click.argument("paths", nargs=-1, type=click.Path())
@click.option("--not-exists", is_flag=True, default=False, help="Drop members whose file is gone")
@handle_errors
def coll_pop(name: str, paths: tuple[str, ...], not_exists: bool) -> None:
    """Remove PATHS from collection NAME (non-members are ignored)."""
    from fsmeta.core.store.persist import open_repository

    if not paths and not not_exists:
        raise click.UsageError("Give at least one PATH or --not-exists")

    with open_repository(write=True) as repo:
        removed = repo.pop_missing(name) if not_exists else []
        removed.extend(repo.pop(name, *paths))
    console.print(f"Removed {len(removed)} from [cyan]{escape(name)}[/cyan]")


@coll_group.command("view")
@click.argument("name", required=False)
@click.option("--files", "-f", is_flag=True, default=False, help="List members")
@click.option("--json", "as_json", is_flag=True, default=False)
@handle_errors
def coll_view(name: str | None, files: bool, as_json: bool) -> None:
    """Show one collection, or all of them."""
    from fsmeta.core.store.persist import open_repository

    with open_repository() as repo:
        if name is not None:
            shown = {name: repo.collection(name)}
        else:
            shown = {n: list(m) for n, m in sorted(repo.state.collections.items())}

    if as_json:
        click.echo(json.dumps(shown, indent=2, ensure_ascii=False))
        return

    for coll_name, members in shown.items():
        console.print(f"[cyan]{escape(coll_name)}[/cyan]: {len(members)} files")
        if files:
            for member in members:
                console.print(f"  {escape(member)}")
