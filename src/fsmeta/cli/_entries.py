"""fsm delete / fsm rename — whole-entry maintenance."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from fsmeta.core.store.persist import open_repository


def cmd_delete(paths: list[str], not_exists: bool, console: Console) -> None:
    removed: list[str] = []
    with open_repository(write=True) as repo:
        if not_exists:
            removed.extend(repo.delete_missing())
        for path in paths:
            key = repo.key(path)
            if repo.delete_entry(path):
                removed.append(key)
            else:
                console.print(f"[yellow]{escape(key)!r} not in repository[/yellow]")

    for key in removed:
        console.print(f"removed {escape(key)}")
    console.print(f"Removed {len(removed)} {'entry' if len(removed) == 1 else 'entries'}")


def cmd_rename(current: str, renamed: str, require_exists: bool, console: Console) -> None:
    with open_repository(write=True) as repo:
        src = repo.key(current)
        dst = repo.rename_entry(current, renamed, require_exists=require_exists)
    console.print(f"{escape(src)} -> {escape(dst)}")
