"""Exceptions for gistnew."""

from __future__ import annotations


class GistNewError(Exception):
    """Base class for every failure the gist pipeline reports."""


class InvalidNameError(GistNewError, ValueError):
    """Raised when the directory name argument is structurally invalid."""


class PreconditionError(GistNewError):
    """Raised when the target directory cannot be used (not writable, already a repo, ...)."""


class CollectError(GistNewError):
    """Raised when the directory holds entries a flat gist cannot represent."""


class BinaryContentError(GistNewError):
    """Raised when a file is not valid UTF-8 text.

    Gists only store text, so binary content is rejected before upload
    rather than being mangled on the way.
    """


class GistCreateError(GistNewError):
    """Raised when the GitHub API call to create the gist fails."""


class IncompleteGistError(GistCreateError):
    """Raised when the API call succeeded but returned no id or URL."""


class MetadataError(GistNewError):
    """Raised when the gist's .git metadata could not be merged into the directory.

    The gist already exists at this point, so the message always carries
    the commands needed to finish the job by hand.
    """

    def __init__(self, message: str, *, gist_id: str | None = None,
                 target_dir: str | None = None):
        super().__init__(message)
        self.gist_id = gist_id
        self.target_dir = target_dir
