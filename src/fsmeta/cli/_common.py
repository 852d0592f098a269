"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import functools
import sys
from collections.abc import Callable
from typing import Any, TypeVar

from rich.console import Console
from rich.markup import escape

from fsmeta.core.exceptions import FsmetaError

err_console = Console(stderr=True)

F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(fn: F) -> F:
    """Print :class:`FsmetaError` on stderr and exit with its code."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except FsmetaError as exc:
            err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
            sys.exit(int(exc.exit_code))

    return wrapper  # type: ignore[return-value]
