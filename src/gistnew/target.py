"""Target directory validation and resolution."""

from __future__ import annotations

import os
import tempfile

from .exceptions import InvalidNameError, PreconditionError

GIT_DIR = ".git"
DEFAULT_DISPLAY_NAME = "gist"
_PROBE_PREFIX = ".gh-gist-new-"


def validate_name(name: str) -> None:
    """Reject names that are empty, ``..``, contain separators, or look like flags.

    ``.`` is always accepted and means the current directory.
    """
    if not name:
        raise InvalidNameError("name cannot be empty")
    if name == ".":
        return
    if name == "..":
        raise InvalidNameError("'..' is not a supported directory name")
    if "/" in name or "\\" in name:
        raise InvalidNameError(f"name {name!r} may not contain path separators")
    if name.startswith("-"):
        raise InvalidNameError(f"name {name!r} may not start with '-'")


def _display_name_for(path: str) -> str:
    base = os.path.basename(path)
    if base in ("", ".", os.sep):
        return DEFAULT_DISPLAY_NAME
    return base


def resolve_target_directory(name: str) -> tuple[str, str]:
    """Resolve *name* to ``(absolute_path, display_name)``.

    ``.`` uses the working directory as-is; any other name is created under
    the working directory when missing.  Either way the result is checked
    for writability and for existing git metadata.
    """
    try:
        cwd = os.getcwd()
    except OSError as exc:
        raise PreconditionError(f"determine working directory: {exc}") from exc

    if name == ".":
        target = os.path.abspath(cwd)
        display = _display_name_for(target)
    else:
        target = os.path.abspath(os.path.join(cwd, name))
        ensure_directory_exists(target)
        display = name

    ensure_writable(target)
    ensure_not_git_repo(target)
    return target, display


def ensure_directory_exists(path: str) -> None:
    """Create *path* (with parents) unless it already exists as a directory."""
    if not os.path.lexists(path):
        try:
            os.makedirs(path, 0o755, exist_ok=True)
        except OSError as exc:
            raise PreconditionError(f"create directory {path}: {exc}") from exc
        return
    if not os.path.isdir(path):
        raise PreconditionError(f"{path} exists but is not a directory")


def ensure_writable(path: str) -> None:
    """Create and immediately remove a probe file inside *path*."""
    try:
        fd, probe = tempfile.mkstemp(prefix=_PROBE_PREFIX, dir=path)
    except OSError as exc:
        raise PreconditionError(f"directory {path} must be writable: {exc}") from exc
    os.close(fd)
    try:
        os.remove(probe)
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise PreconditionError(f"remove writability probe {probe}: {exc}") from exc


def ensure_not_git_repo(path: str) -> None:
    """Fail when *path* already has a ``.git`` entry."""
    git_path = os.path.join(path, GIT_DIR)
    try:
        os.lstat(git_path)
    except FileNotFoundError:
        return
    except OSError as exc:
        raise PreconditionError(f"check git metadata in {path}: {exc}") from exc
    raise PreconditionError(
        f"{path} already contains git metadata; pick a clean folder"
    )
