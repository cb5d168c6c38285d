from .target import validate_name, resolve_target_directory
from .collect import FilePayload, gather_files
from .gist import GistRequest, GistResult, build_gist_request, create_gist, resolve_token
from .clone import clone_gist_metadata, move_git_metadata
from .move import MoveOutcome, move_path
from .exceptions import (
    GistNewError, InvalidNameError, PreconditionError, CollectError,
    BinaryContentError, GistCreateError, IncompleteGistError, MetadataError,
)

__all__ = [
    "validate_name", "resolve_target_directory",
    "FilePayload", "gather_files",
    "GistRequest", "GistResult", "build_gist_request", "create_gist", "resolve_token",
    "clone_gist_metadata", "move_git_metadata",
    "MoveOutcome", "move_path",
    "GistNewError", "InvalidNameError", "PreconditionError", "CollectError",
    "BinaryContentError", "GistCreateError", "IncompleteGistError", "MetadataError",
]
