"""gh-gist-new CLI: create a gist from a directory and bind it to the gist's git history."""

from __future__ import annotations

import time
from dataclasses import dataclass

import click

from ._log import Log, _format_elapsed
from .clone import clone_gist_metadata
from .collect import gather_files
from .exceptions import GistNewError, InvalidNameError
from .gist import DEFAULT_API_URL, build_gist_request, create_gist, resolve_token
from .target import resolve_target_directory, validate_name


@dataclass(frozen=True)
class RunOptions:
    name: str
    public: bool = False
    description: str | None = None
    verbose: bool = False
    api_url: str = DEFAULT_API_URL
    gh: str = "gh"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def run(opts: RunOptions) -> str:
    """Resolve, collect, upload and bind.  Returns the gist URL."""
    log = Log(verbose_enabled=opts.verbose)

    log.info("Resolving target directory…")
    target_dir, display_name = resolve_target_directory(opts.name)
    log.verbose(f"Target directory: {target_dir}")

    log.info("Collecting files for gist…")
    start = time.monotonic()
    files = gather_files(target_dir, display_name, log)
    log.info(f"Collected {len(files)} file(s)")
    log.verbose(f"File collection completed in {_format_elapsed(time.monotonic() - start)}")

    log.info("Creating gist via GitHub API…")
    start = time.monotonic()
    request = build_gist_request(files, public=opts.public, description=opts.description)
    token = resolve_token(opts.api_url, gh=opts.gh)
    result = create_gist(request, token=token, api_url=opts.api_url)
    visibility = "public" if opts.public else "secret"
    log.info(f"Created {visibility} gist: {result.url}")
    log.verbose(f"Gist creation completed in {_format_elapsed(time.monotonic() - start)}")

    log.info("Cloning gist metadata into target directory…")
    start = time.monotonic()
    clone_gist_metadata(result.id, target_dir, log, gh=opts.gh)
    log.verbose(f"Metadata cloning completed in {_format_elapsed(time.monotonic() - start)}")

    log.info(f"Done! Gist ready at {result.url}")
    return result.url


# ---------------------------------------------------------------------------
# Argument callbacks
# ---------------------------------------------------------------------------

def _check_name(ctx, param, value):
    """Click callback: strip and validate the NAME argument."""
    name = value.strip()
    try:
        validate_name(name)
    except InvalidNameError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param)
    return name


def _check_description(ctx, param, value):
    """Click callback: a given --description must not be blank."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise click.BadParameter("description cannot be empty when provided", ctx=ctx, param=param)
    return value


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("name", callback=_check_name)
@click.option("--public", is_flag=True, default=False,
              help="Create the gist as public (defaults to secret).")
@click.option("-d", "--description", default=None, callback=_check_description,
              help="Description to attach to the gist (must not be empty).")
@click.option("--verbose", is_flag=True, default=False,
              help="Show detailed per-file logs and timing information.")
@click.option("--api-url", envvar="GH_GIST_NEW_API_URL", default=DEFAULT_API_URL,
              show_default=True, hidden=True, help="GitHub REST API base URL.")
@click.option("--gh", "gh", envvar="GH_GIST_NEW_GH", default="gh", hidden=True,
              help="gh executable used for 'gist clone' and 'auth token'.")
def main(name, public, description, verbose, api_url, gh):
    """Create a new gist from all regular, non-dot files inside NAME.

    When NAME is '.', the current directory is used; otherwise NAME is
    created under the current directory if needed.  The directory must not
    contain subdirectories or directory symlinks.

    \b
    After the gist is created its .git metadata is moved into the
    directory, so further edits can be pushed with plain git.
    """
    opts = RunOptions(
        name=name, public=public, description=description,
        verbose=verbose, api_url=api_url, gh=gh,
    )
    try:
        run(opts)
    except GistNewError as exc:
        raise click.ClickException(str(exc))
