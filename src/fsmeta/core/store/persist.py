"""
Loading and saving repository state.

Every command runs load → mutate → save against a staged deep copy of the
state, so a failure anywhere in a batch leaves the state file untouched::

    with open_repository(Path.cwd(), write=True) as repo:
        repo.set_tag("a.txt", "count", "10")
        repo.set_comment("a.txt", "note")
    # written here, once, only if the block did not raise

Writes go to a temporary file in the marker directory which is fsynced and
renamed over the live state file; the live file is never truncated in place.
Writers hold an exclusive ``flock`` on the marker directory for the whole
load/save span and fail fast with :class:`RepositoryBusy` if another process
holds it.
"""

from __future__ import annotations

import fcntl
import logging
import os
import shutil
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fsmeta.core.constants import StorageFormat
from fsmeta.core.exceptions import (
    AlreadyInitialized,
    DecodeError,
    RepositoryBusy,
    StorageError,
)
from fsmeta.core.root import RootHandle, init_root, locate_root, require_root
from fsmeta.core.store import codecs
from fsmeta.core.store.model import Repository
from fsmeta.core.store.repository import MetadataRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------


@contextmanager
def repository_lock(handle: RootHandle) -> Iterator[None]:
    """Exclusive, non-blocking lock on the marker directory."""
    try:
        fd = os.open(handle.marker, os.O_RDONLY)
    except OSError as exc:
        raise StorageError(f"Cannot open {handle.marker}: {exc}") from exc
    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            raise RepositoryBusy(handle.marker) from None
        logger.debug("Locked %s", handle.marker)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def load(handle: RootHandle) -> Repository:
    """
    Read and decode the state file.

    Raises:
        StorageError: if the file cannot be read.
        DecodeError: if it is malformed or its format marker disagrees with
            the file it was read from.
    """
    logger.info("Reading %s", handle.state_path)
    start = time.monotonic()
    try:
        data = handle.state_path.read_bytes()
    except OSError as exc:
        raise StorageError(f"Cannot read {handle.state_path}: {exc}") from exc

    try:
        state = codecs.decode(data, handle.format)
    except DecodeError as exc:
        raise DecodeError(f"{handle.state_path}: {exc}") from exc
    if state.format != handle.format:
        raise DecodeError(
            f"{handle.state_path}: format marker {state.format.value!r} "
            f"does not match file format {handle.format.value!r}"
        )
    logger.info("Parsed state in %.1f ms", (time.monotonic() - start) * 1000)
    return state


def save(handle: RootHandle, state: Repository) -> Path:
    """Atomically replace the state file with *state*."""
    path = handle.state_path
    data = codecs.encode(state, handle.format)
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    logger.info("Writing %s (%d bytes)", path, len(data))
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StorageError(f"Cannot write {path}: {exc}") from exc
    return path


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def init_repository(directory: Path, fmt: StorageFormat) -> RootHandle:
    """
    Create a new, empty repository rooted at *directory*.

    The marker directory is removed again on failure only when this call
    created it, and only while holding its lock; a marker another process
    has locked is never touched.
    """
    handle, created = init_root(directory, fmt)
    with repository_lock(handle):
        # another init may have written a state file since init_root looked
        existing = locate_root(handle.root)
        if existing is not None:
            raise AlreadyInitialized(existing.root)
        try:
            save(handle, Repository.empty(fmt))
        except Exception:
            if created:
                shutil.rmtree(handle.marker, ignore_errors=True)
            raise
    logger.info("Initialized %s repository at %s", fmt.value, handle.root)
    return handle


def drop_repository(handle: RootHandle) -> None:
    """Delete the state file and the marker directory."""
    with repository_lock(handle):
        try:
            handle.state_path.unlink()
        except OSError as exc:
            raise StorageError(f"Cannot remove {handle.state_path}: {exc}") from exc
    try:
        handle.marker.rmdir()
    except OSError as exc:
        raise StorageError(f"Cannot remove {handle.marker}: {exc}") from exc
    logger.info("Dropped repository at %s", handle.root)


@contextmanager
def open_repository(
    cwd: Path | None = None, *, write: bool = False
) -> Iterator[MetadataRepository]:
    """
    Locate, load and (when *write* is set) commit the repository around a block.

    The block works on a deep copy of the loaded state. The copy is saved only
    if the block completes without raising and actually changed something.
    """
    cwd = cwd or Path.cwd()
    handle = require_root(cwd)
    if not write:
        yield MetadataRepository(handle, load(handle), cwd=cwd)
        return

    with repository_lock(handle):
        committed = load(handle)
        staged = MetadataRepository(handle, committed.model_copy(deep=True), cwd=cwd)
        yield staged
        if staged.dirty:
            save(handle, staged.state)
        else:
            logger.info("No changes to save")
