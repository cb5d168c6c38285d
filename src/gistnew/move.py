"""Rename-or-copy moves that survive crossing filesystems."""

from __future__ import annotations

import errno
import os
import shutil
import stat
from enum import Enum


class MoveOutcome(str, Enum):
    """How :func:`move_path` got the entry to its destination.

    ``CROSS_DEVICE`` is only ever returned by :func:`_try_rename`; it tells
    the caller to fall back to copying.
    """
    RENAMED = "renamed"
    CROSS_DEVICE = "cross-device"
    COPIED = "copied"

    def __str__(self) -> str:          # noqa: D105
        return self.value


def _try_rename(src: str, dst: str) -> MoveOutcome:
    """Rename *src* to *dst*, reporting EXDEV as an outcome instead of raising.

    Every other rename failure propagates unchanged.
    """
    try:
        os.rename(src, dst)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        return MoveOutcome.CROSS_DEVICE
    return MoveOutcome.RENAMED


def move_path(src: str, dst: str) -> MoveOutcome:
    """Move a file or directory tree from *src* to an absent *dst*."""
    outcome = _try_rename(src, dst)
    if outcome is MoveOutcome.RENAMED:
        return outcome

    try:
        copy_tree(src, dst)
    except OSError:
        _remove_partial(dst)
        raise
    if os.path.isdir(src) and not os.path.islink(src):
        shutil.rmtree(src)
    else:
        os.unlink(src)
    return MoveOutcome.COPIED


def _remove_partial(dst: str) -> None:
    """Best-effort removal of a half-copied *dst*; the copy error is what gets reported."""
    if os.path.isdir(dst) and not os.path.islink(dst):
        shutil.rmtree(dst, ignore_errors=True)
    elif os.path.lexists(dst):
        try:
            os.unlink(dst)
        except OSError:
            pass


def copy_tree(src: str, dst: str) -> None:
    """Recursively copy *src* to *dst*, keeping permission bits and symlinks."""
    st = os.lstat(src)
    if stat.S_ISLNK(st.st_mode):
        os.symlink(os.readlink(src), dst)
        return
    if not stat.S_ISDIR(st.st_mode):
        copy_file(src, dst)
        return

    mode = stat.S_IMODE(st.st_mode)
    # Owner must be able to fill the directory; the real mode is applied last.
    os.makedirs(dst, mode | stat.S_IRWXU, exist_ok=True)
    with os.scandir(src) as it:
        for entry in it:
            copy_tree(entry.path, os.path.join(dst, entry.name))
    os.chmod(dst, mode)


def copy_file(src: str, dst: str) -> None:
    """Copy the bytes of *src* into a new *dst* carrying the source's mode."""
    mode = stat.S_IMODE(os.stat(src).st_mode)
    with open(src, "rb") as fsrc:
        fd = os.open(dst, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as fdst:
            shutil.copyfileobj(fsrc, fdst)
    os.chmod(dst, mode)
