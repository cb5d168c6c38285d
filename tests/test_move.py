"""Tests for move_path and its cross-device copy fallback."""

import errno
import os
import stat
import sys

import pytest

from gistnew import move as move_mod
from gistnew.move import MoveOutcome, _try_rename, copy_file, copy_tree, move_path


def _snapshot(root):
    """Map relative path -> (is_dir, mode bits, bytes or None)."""
    out = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            full = os.path.join(dirpath, name)
            rel = os.path.relpath(full, root)
            st = os.lstat(full)
            data = None
            if stat.S_ISREG(st.st_mode):
                with open(full, "rb") as f:
                    data = f.read()
            out[rel] = (stat.S_ISDIR(st.st_mode), stat.S_IMODE(st.st_mode), data)
    return out


@pytest.fixture
def tree(tmp_path):
    """A small .git-like tree with mixed permission bits."""
    root = tmp_path / "src" / ".git"
    (root / "objects" / "ab").mkdir(parents=True)
    (root / "refs" / "heads").mkdir(parents=True)
    (root / "HEAD").write_bytes(b"ref: refs/heads/main\n")
    (root / "objects" / "ab" / "cdef").write_bytes(bytes(range(256)))
    (root / "refs" / "heads" / "main").write_bytes(b"0" * 40 + b"\n")
    hook = root / "hook.sh"
    hook.write_bytes(b"#!/bin/sh\nexit 0\n")
    hook.chmod(0o755)
    (root / "objects" / "ab" / "cdef").chmod(0o444)
    (root / "objects").chmod(0o750)
    return root


@pytest.fixture
def cross_device(monkeypatch):
    """Make every rename fail the way it does across filesystems."""
    calls = []

    def fake_rename(src, dst):
        calls.append((src, dst))
        raise OSError(errno.EXDEV, "Invalid cross-device link", src)

    monkeypatch.setattr(move_mod.os, "rename", fake_rename)
    return calls


class TestTryRename:
    def test_success(self, tmp_path):
        (tmp_path / "a").write_text("a")
        assert _try_rename(str(tmp_path / "a"), str(tmp_path / "b")) is MoveOutcome.RENAMED
        assert (tmp_path / "b").read_text() == "a"

    def test_cross_device_is_an_outcome(self, tmp_path, cross_device):
        (tmp_path / "a").write_text("a")
        assert _try_rename(str(tmp_path / "a"), str(tmp_path / "b")) is MoveOutcome.CROSS_DEVICE
        assert (tmp_path / "a").exists()

    def test_other_errors_propagate(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            _try_rename(str(tmp_path / "missing"), str(tmp_path / "b"))


class TestMovePath:
    def test_same_device_renames(self, tree, tmp_path):
        before = _snapshot(tree)
        dst = tmp_path / "dst" / ".git"
        dst.parent.mkdir()
        assert move_path(str(tree), str(dst)) is MoveOutcome.RENAMED
        assert _snapshot(dst) == before
        assert not tree.exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_cross_device_copies_tree(self, tree, tmp_path, cross_device):
        before = _snapshot(tree)
        top_mode = stat.S_IMODE(os.stat(tree).st_mode)
        dst = tmp_path / "dst" / ".git"
        dst.parent.mkdir()

        assert move_path(str(tree), str(dst)) is MoveOutcome.COPIED

        assert cross_device == [(str(tree), str(dst))]
        assert _snapshot(dst) == before
        assert stat.S_IMODE(os.stat(dst).st_mode) == top_mode
        assert not tree.exists()

    def test_cross_device_single_file(self, tmp_path, cross_device):
        src = tmp_path / ".gitattributes"
        src.write_bytes(b"* text=auto\n")
        dst = tmp_path / "out"
        dst.mkdir()
        assert move_path(str(src), str(dst / ".gitattributes")) is MoveOutcome.COPIED
        assert (dst / ".gitattributes").read_bytes() == b"* text=auto\n"
        assert not src.exists()

    def test_other_rename_failure_not_downgraded(self, tree, tmp_path, monkeypatch):
        def fake_rename(src, dst):
            raise PermissionError(errno.EACCES, "Permission denied", src)

        monkeypatch.setattr(move_mod.os, "rename", fake_rename)
        dst = tmp_path / "dst"
        with pytest.raises(PermissionError):
            move_path(str(tree), str(dst))
        assert tree.exists()
        assert not dst.exists()


class TestCopy:
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_copy_file_applies_mode(self, tmp_path):
        src = tmp_path / "run.sh"
        src.write_bytes(b"#!/bin/sh\n")
        src.chmod(0o741)
        copy_file(str(src), str(tmp_path / "copy.sh"))
        assert (tmp_path / "copy.sh").read_bytes() == b"#!/bin/sh\n"
        assert stat.S_IMODE(os.stat(tmp_path / "copy.sh").st_mode) == 0o741

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks")
    def test_copy_tree_keeps_symlinks(self, tmp_path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "target.txt").write_text("t")
        (src / "link").symlink_to("target.txt")
        copy_tree(str(src), str(tmp_path / "dst"))
        assert os.readlink(tmp_path / "dst" / "link") == "target.txt"
        assert (tmp_path / "dst" / "link").read_text() == "t"


class TestPartialCopy:
    def test_failed_copy_removes_partial_destination(self, tree, tmp_path,
                                                     cross_device, monkeypatch):
        before = _snapshot(tree)
        real_copy_file = move_mod.copy_file
        copied = []

        def flaky_copy_file(src, dst):
            if copied:
                raise OSError(errno.ENOSPC, "No space left on device", dst)
            real_copy_file(src, dst)
            copied.append(src)

        monkeypatch.setattr(move_mod, "copy_file", flaky_copy_file)
        dst = tmp_path / "dst" / ".git"
        dst.parent.mkdir()
        with pytest.raises(OSError, match="No space left"):
            move_path(str(tree), str(dst))
        assert len(copied) == 1
        assert not dst.exists()
        assert _snapshot(tree) == before
