"""fsm open — hand a URL tag to an external application."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from fsmeta.core.exceptions import TagTypeMismatch
from fsmeta.core.opener import open_url
from fsmeta.core.store.persist import open_repository
from fsmeta.core.store.repository import SELF, Target
from fsmeta.core.values import UrlValue, kind_of


def resolve_urls(tag: str, targets: list[Target]) -> list[tuple[str, str]]:
    """``(scope, url)`` for every target; fails on the first missing or non-URL tag."""
    resolved: list[tuple[str, str]] = []
    with open_repository() as repo:
        for target in targets:
            scope = repo.key(target)
            value = repo.get_tag(target, tag)
            match value:
                case UrlValue(value=url):
                    resolved.append((scope, url))
                case _:
                    raise TagTypeMismatch(scope, tag, expected="url", actual=kind_of(value))
    return resolved


def cmd_open(
    tag: str, paths: list[str], include_self: bool, command: str, console: Console
) -> None:
    targets: list[Target] = list(paths)
    if include_self:
        targets.insert(0, SELF)

    for scope, url in resolve_urls(tag, targets):
        console.print(f"{escape(scope)}: opening {escape(url)}")
        open_url(url, command)
