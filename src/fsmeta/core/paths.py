"""
Root-relative path keys.

Every stored path is a slash-separated key relative to the repository root.
Symlinks are resolved before the key is computed, for the root as well as for
the target, so two spellings of the same real location always share one key.
The root directory itself has the key ``"."``. Keys must be valid UTF-8; a
file name carrying undecodable bytes is rejected rather than stored lossily.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from fsmeta.core.exceptions import InvalidPath, PathOutsideRoot

ROOT_KEY = "."


def resolve(path: str | os.PathLike[str], cwd: Path | None = None) -> Path:
    """Absolute, symlink-free form of *path* (relative paths are taken from *cwd*)."""
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = (cwd or Path.cwd()) / p
    return p.resolve(strict=False)


def normalize_path(root: Path, path: str | os.PathLike[str], cwd: Path | None = None) -> str:
    """
    Map *path* to its key relative to *root*.

    Raises:
        PathOutsideRoot: if the resolved path is not *root* or below it.
        InvalidPath: if the key is not valid UTF-8 (a file name holding
            undecodable bytes).
    """
    real_root = root.resolve(strict=False)
    target = resolve(path, cwd)
    try:
        rel = target.relative_to(real_root)
    except ValueError:
        raise PathOutsideRoot(path, real_root) from None
    if not rel.parts:
        return ROOT_KEY
    key = PurePosixPath(*rel.parts).as_posix()
    try:
        key.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidPath(path) from None
    return key


def normalize_paths(
    root: Path, paths: Iterable[str | os.PathLike[str]], cwd: Path | None = None
) -> list[str]:
    """Normalize every path, failing on the first one outside *root*."""
    return [normalize_path(root, p, cwd) for p in paths]


def key_to_path(root: Path, key: str) -> Path:
    """Absolute filesystem path for a stored key."""
    if key == ROOT_KEY:
        return root
    return root.joinpath(*PurePosixPath(key).parts)
