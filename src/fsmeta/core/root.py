"""
Repository root discovery and creation.

A root is any directory holding a ``.fsm`` marker directory that contains one
state file. Discovery walks from the start directory up through its ancestors,
closest first, and stops at the filesystem root. Nothing is cached: callers
get a :class:`RootHandle` back and pass it explicitly to everything that
needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from fsmeta.core.constants import (
    FORMAT_SEARCH_ORDER,
    MARKER_DIR_NAME,
    STATE_FILENAMES,
    StorageFormat,
)
from fsmeta.core.exceptions import AlreadyInitialized, RootNotFound, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RootHandle:
    """A located repository: root directory plus its state file and format."""

    root: Path
    format: StorageFormat

    @property
    def marker(self) -> Path:
        return self.root / MARKER_DIR_NAME

    @property
    def state_path(self) -> Path:
        return self.marker / STATE_FILENAMES[self.format]


def _state_format(marker: Path) -> StorageFormat | None:
    """Format of the state file inside *marker*, or None if it holds none."""
    found: list[StorageFormat] = []
    for fmt in FORMAT_SEARCH_ORDER:
        candidate = marker / STATE_FILENAMES[fmt]
        if candidate.is_file():
            found.append(fmt)
        elif candidate.exists():
            raise StorageError(f"{candidate} exists but is not a regular file")
    if len(found) > 1:
        logger.warning(
            "Multiple state files in %s (%s); using %s",
            marker,
            ", ".join(f.value for f in found),
            found[0].value,
        )
    return found[0] if found else None


def locate_root(start: Path) -> RootHandle | None:
    """Return the nearest repository at or above *start*, or None."""
    start = start.resolve(strict=False)
    for directory in (start, *start.parents):
        marker = directory / MARKER_DIR_NAME
        if not marker.is_dir():
            continue
        fmt = _state_format(marker)
        if fmt is None:
            logger.debug("Ignoring %s: no state file", marker)
            continue
        logger.info("Repository root: %s (%s)", directory, fmt.value)
        return RootHandle(root=directory, format=fmt)
    return None


def require_root(start: Path) -> RootHandle:
    """Like :func:`locate_root` but raises :class:`RootNotFound` when absent."""
    handle = locate_root(start)
    if handle is None:
        raise RootNotFound(start)
    return handle


def init_root(directory: Path, fmt: StorageFormat) -> tuple[RootHandle, bool]:
    """
    Create the ``.fsm`` marker directory in *directory*.

    The state file itself is written by the caller. A leftover marker
    directory without a state file is reused. Returns the handle and whether
    this call created the marker directory.

    Raises:
        AlreadyInitialized: if a repository exists at or above *directory*.
        StorageError: if the marker path exists and is not a directory.
    """
    directory = directory.resolve(strict=False)
    existing = locate_root(directory)
    if existing is not None:
        raise AlreadyInitialized(existing.root)

    marker = directory / MARKER_DIR_NAME
    if marker.exists() and not marker.is_dir():
        raise StorageError(f"{marker} exists but is not a directory")
    try:
        marker.mkdir(parents=False)
        created = True
    except FileExistsError:
        created = False
    except OSError as exc:
        raise StorageError(f"Cannot create {marker}: {exc}") from exc

    if created:
        logger.info("Created marker directory %s", marker)
    return RootHandle(root=directory, format=fmt), created
