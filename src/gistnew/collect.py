"""Enumerate a flat directory into gist file payloads."""

from __future__ import annotations

import os
from dataclasses import dataclass

from ._log import Log
from .exceptions import CollectError


@dataclass(frozen=True)
class FilePayload:
    """One file to upload.

    Attributes:
        name: Entry name inside the target directory (also the gist filename).
        path: Absolute path on disk.
        content: Raw file bytes.
    """
    name: str
    path: str
    content: bytes


def default_file_name(display_name: str) -> str:
    return f"{display_name}.md"


def _classify(entry: os.DirEntry) -> str:
    """Return ``"symlink-dir"``, ``"dir"``, ``"dotfile"``, ``"special"``, or ``"file"``.

    Symlinks are judged by their target only to detect directories; any
    other symlink counts as a non-regular entry, like sockets and devices.
    """
    if entry.is_symlink():
        if entry.is_dir(follow_symlinks=True):
            return "symlink-dir"
    elif entry.is_dir(follow_symlinks=False):
        return "dir"
    if entry.name.startswith("."):
        return "dotfile"
    if not entry.is_file(follow_symlinks=False):
        return "special"
    return "file"


def gather_files(directory: str, display_name: str, log: Log) -> list[FilePayload]:
    """Collect every regular, non-dot file in *directory*, sorted by name.

    Raises :class:`CollectError` on the first subdirectory or symlinked
    directory.  When nothing is collected, writes ``<display_name>.md`` with
    a heading line and returns it as the only payload.
    """
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise CollectError(f"read directory {directory}: {exc}") from exc

    files: list[FilePayload] = []
    for entry in entries:
        try:
            kind = _classify(entry)
        except OSError as exc:
            raise CollectError(f"inspect {entry.name}: {exc}") from exc

        if kind == "symlink-dir":
            raise CollectError(
                f"symlink {entry.name} targets a directory; gists cannot include directories"
            )
        if kind == "dir":
            raise CollectError(
                f"subdirectory {entry.name} detected; gists only support flat file sets"
            )
        if kind == "dotfile":
            log.verbose(f"Skipping dotfile {entry.name}")
            continue
        if kind == "special":
            log.verbose(f"Skipping non-regular file {entry.name}")
            continue

        try:
            with open(entry.path, "rb") as f:
                content = f.read()
        except OSError as exc:
            raise CollectError(f"read {entry.name}: {exc}") from exc
        files.append(FilePayload(name=entry.name, path=entry.path, content=content))
        log.verbose(f"Queued {entry.name} ({len(content)} bytes)")

    if not files:
        files.append(_bootstrap_default_file(directory, display_name))
        log.info(f"Directory was empty; created {files[0].name}")
    return files


def _bootstrap_default_file(directory: str, display_name: str) -> FilePayload:
    """Write the placeholder ``<display_name>.md`` so the gist has one file."""
    name = default_file_name(display_name)
    content = f"# {display_name}\n".encode("utf-8")
    path = os.path.join(directory, name)
    try:
        with open(path, "wb") as f:
            f.write(content)
    except OSError as exc:
        raise CollectError(f"bootstrap default file {name}: {exc}") from exc
    return FilePayload(name=name, path=path, content=content)
