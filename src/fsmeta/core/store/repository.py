"""
In-memory metadata repository.

:class:`MetadataRepository` wraps a loaded :class:`Repository` state together
with the :class:`RootHandle` it belongs to and exposes every mutation the CLI
needs. Nothing here touches disk; :mod:`fsmeta.core.store.persist` loads the
state before and writes it back after a successful command.

Targets are filesystem paths (absolute, or relative to ``cwd``) or the
:data:`SELF` scope, which addresses the tags and comment attached to the
repository itself.

Usage::

    repo = MetadataRepository(handle, state, cwd=Path.cwd())
    repo.set_tag("notes/a.txt", "count", "10")
    repo.push("reading", "notes/a.txt", "notes/b.txt")
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from enum import Enum
from pathlib import Path

from fsmeta.core.constants import SELF_LABEL
from fsmeta.core.exceptions import (
    CollectionExists,
    CollectionNotFound,
    EntryExists,
    EntryNotFound,
    TagNotFound,
)
from fsmeta.core.paths import key_to_path, normalize_path
from fsmeta.core.root import RootHandle
from fsmeta.core.store.model import Entry, Repository
from fsmeta.core.values import TypedValue, parse_value, validate_tag_key

logger = logging.getLogger(__name__)


class Scope(Enum):
    SELF = "self"


SELF = Scope.SELF

Target = str | os.PathLike[str] | Scope


class MetadataRepository:
    """Entries, collections and root-scope metadata for one repository root."""

    def __init__(self, handle: RootHandle, state: Repository, cwd: Path | None = None) -> None:
        self.handle = handle
        self.state = state
        self.cwd = cwd or Path.cwd()
        self.dirty = False

    @property
    def root(self) -> Path:
        return self.handle.root

    # ------------------------------------------------------------------
    # Keys and entries
    # ------------------------------------------------------------------

    def key(self, target: Target) -> str:
        """Root-relative key for *target* (``!SELF`` for the root scope)."""
        if target is SELF:
            return SELF_LABEL
        return normalize_path(self.root, target, self.cwd)

    def _changed(self, entry: Entry | None = None) -> None:
        if entry is not None:
            entry.touch()
        self.state.touch()
        self.dirty = True

    def get_entry(self, target: Target) -> Entry | None:
        if target is SELF:
            return self.state.root
        return self.state.entries.get(self.key(target))

    def _entry_for_write(self, target: Target) -> tuple[str, Entry]:
        if target is SELF:
            return SELF_LABEL, self.state.root
        key = self.key(target)
        entry = self.state.entries.get(key)
        if entry is None:
            logger.info("Adding entry %s", key)
            entry = Entry()
            self.state.entries[key] = entry
        return key, entry

    def _prune(self, key: str) -> None:
        entry = self.state.entries.get(key)
        if entry is not None and entry.is_empty:
            logger.info("Pruning empty entry %s", key)
            del self.state.entries[key]

    def prune(self, target: Target) -> bool:
        """Drop the entry for *target* if it has neither tags nor a comment."""
        if target is SELF:
            return False
        key = self.key(target)
        present = key in self.state.entries
        self._prune(key)
        return present and key not in self.state.entries

    def iter_entries(self) -> Iterator[tuple[str, Entry]]:
        yield from self.state.entries.items()

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def set_tag(self, target: Target, key: str, raw_value: str | None) -> TypedValue | None:
        """Parse *raw_value* and store it under *key*; ``None`` stores a flag tag."""
        validate_tag_key(key)
        value = None if raw_value is None else parse_value(raw_value)
        entry_key, entry = self._entry_for_write(target)
        entry.tags[key] = value
        logger.debug("%s: %s = %r", entry_key, key, value)
        self._changed(entry)
        return value

    def remove_tag(self, target: Target, key: str, *, prune: bool = True) -> bool:
        """
        Remove *key*; returns False (and changes nothing) if it was absent.

        With *prune* unset an entry left empty is kept until :meth:`prune`
        is called for it.
        """
        entry = self.get_entry(target)
        if entry is None or key not in entry.tags:
            return False
        del entry.tags[key]
        self._changed(entry)
        if prune:
            self.prune(target)
        return True

    def clear_tags(self, target: Target, *, prune: bool = True) -> bool:
        entry = self.get_entry(target)
        if entry is None or not entry.tags:
            return False
        entry.tags.clear()
        self._changed(entry)
        if prune:
            self.prune(target)
        return True

    def get_tag(self, target: Target, key: str) -> TypedValue | None:
        """
        Stored value of tag *key* (``None`` for a flag tag).

        Raises:
            TagNotFound: if the target has no entry or the entry lacks *key*.
        """
        entry = self.get_entry(target)
        if entry is None or key not in entry.tags:
            raise TagNotFound(self.key(target), key)
        return entry.tags[key]

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def set_comment(self, target: Target, text: str) -> None:
        _, entry = self._entry_for_write(target)
        entry.comment = text
        self._changed(entry)

    def remove_comment(self, target: Target, *, prune: bool = True) -> bool:
        entry = self.get_entry(target)
        if entry is None or entry.comment is None:
            return False
        entry.comment = None
        self._changed(entry)
        if prune:
            self.prune(target)
        return True

    # ------------------------------------------------------------------
    # Whole entries
    # ------------------------------------------------------------------

    def delete_entry(self, target: Target) -> bool:
        key = self.key(target)
        if self.state.entries.pop(key, None) is None:
            logger.info("Not in repository: %s", key)
            return False
        logger.info("Removed entry %s", key)
        self._changed()
        return True

    def delete_missing(self) -> list[str]:
        """Drop every entry whose file no longer exists; returns the removed keys."""
        missing = [k for k in self.state.entries if not key_to_path(self.root, k).exists()]
        for key in missing:
            logger.info("Removing %s: file does not exist", key)
            del self.state.entries[key]
        if missing:
            self._changed()
        return missing

    def rename_entry(
        self, current: Target, renamed: Target, *, require_exists: bool = False
    ) -> str:
        """
        Move the entry for *current* to *renamed*; collection members follow.

        Raises:
            EntryNotFound: if *current* has no entry.
            EntryExists: if *renamed* already has one.

        Renaming an entry to itself returns its key and changes nothing.
        """
        src = self.key(current)
        dst = self.key(renamed)
        if src not in self.state.entries:
            raise EntryNotFound(src)
        if src == dst:
            return dst
        if dst in self.state.entries:
            raise EntryExists(dst)
        if require_exists and not key_to_path(self.root, dst).exists():
            raise EntryNotFound(f"{dst} (path does not exist)")

        entry = self.state.entries.pop(src)
        self.state.entries[dst] = entry
        for members in self.state.collections.values():
            if src not in members:
                continue
            if dst in members:
                members.remove(src)
            else:
                members[members.index(src)] = dst
        logger.info("Renamed %s -> %s", src, dst)
        self._changed(entry)
        return dst

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def _members(self, name: str) -> list[str]:
        members = self.state.collections.get(name)
        if members is None:
            raise CollectionNotFound(name)
        return members

    def collection(self, name: str) -> list[str]:
        return list(self._members(name))

    def create_collection(self, name: str) -> None:
        if name in self.state.collections:
            raise CollectionExists(name)
        self.state.collections[name] = []
        logger.info("Created collection %s", name)
        self._changed()

    def delete_collection(self, name: str) -> list[str]:
        """Remove collection *name*; returns its former members."""
        members = self._members(name)
        del self.state.collections[name]
        logger.info("Deleted collection %s (%d members)", name, len(members))
        self._changed()
        return members

    def push(self, name: str, *paths: str | os.PathLike[str]) -> list[str]:
        """Append each path not already a member; returns the keys actually added."""
        members = self._members(name)
        keys = [self.key(p) for p in paths]
        present = set(members)
        added: list[str] = []
        for key in keys:
            if key in present:
                continue
            present.add(key)
            members.append(key)
            added.append(key)
        if added:
            self._changed()
        return added

    def pop(self, name: str, *paths: str | os.PathLike[str]) -> list[str]:
        """Remove each path that is a member; absent paths are ignored."""
        members = self._members(name)
        keys = {self.key(p) for p in paths}
        removed = [m for m in members if m in keys]
        if removed:
            members[:] = [m for m in members if m not in keys]
            self._changed()
        return removed

    def pop_missing(self, name: str) -> list[str]:
        """Remove members whose file no longer exists."""
        members = self._members(name)
        removed = [m for m in members if not key_to_path(self.root, m).exists()]
        if removed:
            gone = set(removed)
            members[:] = [m for m in members if m not in gone]
            self._changed()
        return removed
