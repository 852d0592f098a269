"""Unit tests for fsmeta.core.paths — root-relative key normalization."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from fsmeta.core.exceptions import InvalidPath, PathOutsideRoot
from fsmeta.core.paths import ROOT_KEY, key_to_path, normalize_path, normalize_paths


class TestNormalizePath:
    def test_relative_to_cwd(self, root: Path) -> None:
        (root / "docs").mkdir()
        assert normalize_path(root, "a.txt", cwd=root / "docs") == "docs/a.txt"

    def test_absolute(self, root: Path) -> None:
        assert normalize_path(root, root / "x" / "y.md", cwd=root) == "x/y.md"

    def test_dot_segments(self, root: Path) -> None:
        assert normalize_path(root, "./a/../b/./c.txt", cwd=root) == "b/c.txt"

    def test_root_itself(self, root: Path) -> None:
        assert normalize_path(root, ".", cwd=root) == ROOT_KEY
        assert normalize_path(root, root, cwd=root / "sub") == ROOT_KEY

    def test_path_need_not_exist(self, root: Path) -> None:
        assert normalize_path(root, "missing/file.bin", cwd=root) == "missing/file.bin"

    def test_outside_root(self, root: Path) -> None:
        with pytest.raises(PathOutsideRoot):
            normalize_path(root, root.parent / "elsewhere.txt", cwd=root)

    def test_dotdot_escaping_root(self, root: Path) -> None:
        with pytest.raises(PathOutsideRoot):
            normalize_path(root, "../sibling", cwd=root)

    def test_sibling_with_common_prefix_is_outside(self, root: Path) -> None:
        sibling = root.parent / (root.name + "-other")
        sibling.mkdir()
        with pytest.raises(PathOutsideRoot):
            normalize_path(root, sibling / "f", cwd=root)


class TestIdempotence:
    def test_normalized_key_maps_to_itself(self, root: Path) -> None:
        key = normalize_path(root, "a/./b/../c.txt", cwd=root)
        assert normalize_path(root, key, cwd=root) == key

    def test_two_spellings_same_key(self, root: Path) -> None:
        (root / "a").mkdir()
        one = normalize_path(root, "a/f.txt", cwd=root)
        two = normalize_path(root, "../f.txt", cwd=root / "a" / "b")
        three = normalize_path(root, str(root / "a" / "f.txt"), cwd=Path("/"))
        assert one == "a/f.txt"
        assert two == "a/f.txt"
        assert three == "a/f.txt"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
class TestSymlinks:
    def test_symlinked_directory_resolves(self, root: Path) -> None:
        real = root / "real"
        real.mkdir()
        (root / "link").symlink_to(real, target_is_directory=True)
        assert normalize_path(root, "link/f.txt", cwd=root) == "real/f.txt"
        assert normalize_path(root, "real/f.txt", cwd=root) == "real/f.txt"

    def test_symlink_pointing_outside(self, root: Path, tmp_path: Path) -> None:
        outside = tmp_path / "outside"
        outside.mkdir()
        (root / "escape").symlink_to(outside, target_is_directory=True)
        with pytest.raises(PathOutsideRoot):
            normalize_path(root, "escape/f.txt", cwd=root)

    def test_root_given_through_symlink(self, root: Path, tmp_path: Path) -> None:
        alias = tmp_path / "alias"
        alias.symlink_to(root, target_is_directory=True)
        assert normalize_path(alias, root / "f.txt", cwd=root) == "f.txt"


class TestHelpers:
    def test_normalize_paths_fails_on_any_outside(self, root: Path) -> None:
        with pytest.raises(PathOutsideRoot):
            normalize_paths(root, ["a", "/"], cwd=root)

    def test_key_to_path(self, root: Path) -> None:
        assert key_to_path(root, "a/b.txt") == root / "a" / "b.txt"
        assert key_to_path(root, ROOT_KEY) == root


class TestUndecodableNames:
    def test_rejected(self, root: Path) -> None:
        name = os.fsdecode(b"bad\xff.txt")
        with pytest.raises(InvalidPath):
            normalize_path(root, name, cwd=root)

    def test_rejected_when_file_exists(self, root: Path) -> None:
        try:
            (root / os.fsdecode(b"bad\xff.txt")).write_text("x")
        except (OSError, UnicodeEncodeError):
            pytest.skip("filesystem does not accept undecodable names")
        with pytest.raises(InvalidPath):
            normalize_path(root, os.fsdecode(b"bad\xff.txt"), cwd=root)

    def test_undecodable_directory_component(self, root: Path) -> None:
        with pytest.raises(InvalidPath):
            normalize_path(root, os.fsdecode(b"dir\xfe/ok.txt"), cwd=root)

    def test_non_ascii_utf8_is_fine(self, root: Path) -> None:
        assert normalize_path(root, "café/naïve.txt", cwd=root) == "café/naïve.txt"
