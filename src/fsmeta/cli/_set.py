"""fsm set — apply tag and comment changes to a batch of paths."""

from __future__ import annotations

import logging

from rich.console import Console

from fsmeta.core.store.persist import open_repository
from fsmeta.core.store.repository import SELF, Target

logger = logging.getLogger(__name__)


def cmd_set(
    paths: list[str],
    include_self: bool,
    tags: list[tuple[str, str | None]],
    drops: list[str],
    drop_all: bool,
    comment: str | None,
    drop_comment: bool,
    console: Console,
) -> None:
    targets: list[Target] = list(paths)
    if include_self:
        targets.insert(0, SELF)

    with open_repository(write=True) as repo:
        # Resolve every path up front so one bad path fails the whole batch
        # before anything is staged.
        keys = {repo.key(t) for t in targets}
        for target in targets:
            if drop_all:
                repo.clear_tags(target, prune=False)
            for key in drops:
                repo.remove_tag(target, key, prune=False)
            for key, raw in tags:
                repo.set_tag(target, key, raw)
            if drop_comment:
                repo.remove_comment(target, prune=False)
            elif comment is not None:
                repo.set_comment(target, comment)
            repo.prune(target)

    logger.info("Updated %d target(s)", len(keys))
    console.print(f"Updated {len(keys)} {'entry' if len(keys) == 1 else 'entries'}")
