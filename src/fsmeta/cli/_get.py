"""fsm get — show tags and comments."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from fsmeta.core.constants import SELF_LABEL
from fsmeta.core.store.model import Entry
from fsmeta.core.store.persist import open_repository

SortKey = Callable[[str, Entry], Any]

SORT_KEYS: dict[str, SortKey] = {
    "name": lambda label, entry: label,
    "created": lambda label, entry: entry.created,
    # entries never updated sort after those that were
    "updated": lambda label, entry: (entry.updated is None, entry.updated or entry.created),
    "date": lambda label, entry: entry.modified,
}


def _matches(entry: Entry, includes: list[str], excludes: list[str]) -> bool:
    if any(key not in entry.tags for key in includes):
        return False
    return not any(key in entry.tags for key in excludes)


def _entry_json(label: str, entry: Entry, show_tags: bool, show_comment: bool) -> dict[str, Any]:
    row: dict[str, Any] = {"path": label}
    if show_tags:
        row["tags"] = {
            k: (v.model_dump(mode="json") if v is not None else None) for k, v in entry.tags.items()
        }
    if show_comment:
        row["comment"] = entry.comment
    row["created"] = entry.created.isoformat()
    row["updated"] = entry.updated.isoformat() if entry.updated else None
    return row


def _local(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M:%S %z")


def _print_entry(
    label: str, entry: Entry, show_tags: bool, show_comment: bool, title: bool, console: Console
) -> None:
    printed = False
    if title:
        console.print(f"[bold cyan]@ {escape(label)}[/bold cyan]")

    if show_tags and entry.tags:
        flags = sorted(k for k, v in entry.tags.items() if v is None)
        valued = sorted(k for k, v in entry.tags.items() if v is not None)
        for key in flags:
            console.print(escape(key))
        width = max((len(k) for k in valued), default=0)
        for key in valued:
            value = entry.tags[key]
            text = escape(str(value))
            console.print(f"{escape(key):>{width}}: {text}  [dim]({value.type})[/dim]")
        printed = True

    if show_comment and entry.comment is not None:
        console.print(f"comment: {escape(entry.comment)}")
        printed = True

    if printed:
        console.print(f"[dim]{_local(entry.modified)}[/dim]")


def cmd_get(
    paths: list[str],
    all_: bool,
    include_self: bool,
    show_tags: bool,
    show_comment: bool,
    sort_by: list[str],
    includes: list[str],
    excludes: list[str],
    as_json: bool,
    console: Console,
) -> None:
    with open_repository() as repo:
        selected: list[tuple[str, Entry]] = []
        if all_:
            selected.extend(repo.iter_entries())
        else:
            seen: set[str] = set()
            for path in paths:
                key = repo.key(path)
                if key in seen:
                    continue
                seen.add(key)
                entry = repo.state.entries.get(key)
                if entry is None:
                    if not as_json:
                        console.print(f"[yellow]{escape(key)!r} not found[/yellow]")
                    continue
                selected.append((key, entry))

        selected = [(k, e) for k, e in selected if _matches(e, includes, excludes)]
        selected.sort(key=lambda item: tuple(SORT_KEYS[s](*item) for s in sort_by))

        if include_self and _matches(repo.state.root, includes, excludes):
            selected.insert(0, (SELF_LABEL, repo.state.root))

    if as_json:
        rows = [_entry_json(k, e, show_tags, show_comment) for k, e in selected]
        click.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return

    title = len(selected) > 1
    for label, entry in selected:
        _print_entry(label, entry, show_tags, show_comment, title, console)
    console.print(f"Total: {len(selected)}")
