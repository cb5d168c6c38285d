"""Bind a directory to a freshly created gist's git history.

The gist is cloned into a scratch directory with ``gh gist clone``; only
the ``.git*`` metadata entries are then moved into the target directory,
which already holds the working-tree files.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from ._log import Log
from .exceptions import MetadataError
from .move import move_path
from .target import GIT_DIR

GIT_PREFIX = ".git"
GITIGNORE = ".gitignore"
_SCRATCH_PREFIX = "gh-gist-new-"


def run_gist_clone(gh: str, gist_id: str, dest: str) -> subprocess.CompletedProcess:
    """Run ``gh gist clone`` with stdout and stderr captured together."""
    return subprocess.run(
        [gh, "gist", "clone", gist_id, dest],
        stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
    )


def _is_metadata_entry(name: str) -> bool:
    """True for ``.git``-prefixed entries other than ``.gitignore``."""
    if name == GITIGNORE:
        return False
    return name.startswith(GIT_PREFIX)


def move_git_metadata(src_dir: str, dst_dir: str) -> list[str]:
    """Move metadata entries from *src_dir* into *dst_dir*.

    Existing destination entries with the same name are replaced.  Returns
    the moved names; raises :class:`MetadataError` when ``.git`` itself was
    not among them.
    """
    try:
        names = sorted(os.listdir(src_dir))
    except OSError as exc:
        raise MetadataError(f"inspect cloned gist: {exc}", target_dir=dst_dir) from exc

    moved: list[str] = []
    for name in names:
        if not _is_metadata_entry(name):
            continue
        src = os.path.join(src_dir, name)
        dst = os.path.join(dst_dir, name)
        try:
            _remove_existing(dst)
        except OSError as exc:
            raise MetadataError(f"prepare destination {dst}: {exc}", target_dir=dst_dir) from exc
        try:
            move_path(src, dst)
        except OSError as exc:
            raise MetadataError(
                f"move {name} into target directory: {exc}", target_dir=dst_dir
            ) from exc
        moved.append(name)

    if GIT_DIR not in moved:
        raise MetadataError("cloned gist did not include a .git directory", target_dir=dst_dir)
    return moved


def _remove_existing(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.unlink(path)


def _bound_head(target_dir: str) -> str:
    """Open the bound working copy and return what HEAD points at."""
    with Repo(target_dir) as repo:
        head = repo.refs.read_ref(b"HEAD")
    return head.decode("utf-8", "replace") if head else "(unborn)"


def _clone_hint(gh: str, gist_id: str, target_dir: str) -> str:
    return f"'{gh} gist clone {gist_id} <tempdir>' then move .git into {target_dir}"


def clone_gist_metadata(gist_id: str, target_dir: str, log: Log, *, gh: str = "gh") -> None:
    """Clone gist *gist_id* to a scratch directory and merge its metadata into *target_dir*.

    Every failure raises :class:`MetadataError` with the manual recovery
    commands embedded, since the gist itself already exists.  The scratch
    directory is removed on every exit path.
    """
    hint = _clone_hint(gh, gist_id, target_dir)
    try:
        scratch_dir = tempfile.TemporaryDirectory(prefix=_SCRATCH_PREFIX)
    except OSError as exc:
        raise MetadataError(
            f"create temporary directory for cloning (retry manually: {hint}): {exc}",
            gist_id=gist_id, target_dir=target_dir,
        ) from exc

    with scratch_dir as scratch:
        clone_dir = os.path.join(scratch, "clone")
        try:
            proc = run_gist_clone(gh, gist_id, clone_dir)
        except OSError as exc:
            raise MetadataError(
                f"failed to clone gist metadata (retry manually: {hint}): {exc}",
                gist_id=gist_id, target_dir=target_dir,
            ) from exc

        output = (proc.stdout or "").strip()
        if proc.returncode != 0:
            raise MetadataError(
                f"failed to clone gist metadata (retry manually: {hint}): "
                f"exit status {proc.returncode}\n{output}",
                gist_id=gist_id, target_dir=target_dir,
            )
        if output:
            log.verbose(f"gh gist clone output:\n{output}")

        try:
            moved = move_git_metadata(clone_dir, target_dir)
        except MetadataError as exc:
            raise MetadataError(
                f"failed to move git metadata (run {hint} manually): {exc}",
                gist_id=gist_id, target_dir=target_dir,
            ) from exc
        log.verbose(f"Moved {', '.join(moved)} into {target_dir}")

    try:
        head = _bound_head(target_dir)
    except (NotGitRepository, OSError) as exc:
        git_path = os.path.join(target_dir, GIT_DIR)
        raise MetadataError(
            f"{git_path} was moved into place but cannot be opened as a git "
            f"repository: {exc}\nRemove {git_path}, then run {hint}",
            gist_id=gist_id, target_dir=target_dir,
        ) from exc
    log.verbose(f"Bound {target_dir} to HEAD {head}")
