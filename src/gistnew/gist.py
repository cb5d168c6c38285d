"""Gist creation through the GitHub REST API."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx

from .collect import FilePayload
from .exceptions import BinaryContentError, GistCreateError, IncompleteGistError

DEFAULT_API_URL = "https://api.github.com"
_API_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}
_TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class GistRequest:
    public: bool
    files: dict[str, str] = field(default_factory=dict)
    description: str | None = None

    def to_json(self) -> dict:
        """Return the body for ``POST /gists``."""
        body: dict = {
            "public": self.public,
            "files": {name: {"content": text} for name, text in self.files.items()},
        }
        if self.description is not None:
            body["description"] = self.description
        return body


@dataclass(frozen=True)
class GistResult:
    id: str
    url: str


def build_gist_request(
    files: Sequence[FilePayload], *, public: bool, description: str | None = None,
) -> GistRequest:
    """Build the create request from collected payloads.

    Raises :class:`BinaryContentError` for any file that is not UTF-8 text.
    """
    req = GistRequest(public=public)
    if description is not None and description.strip():
        req.description = description.strip()
    for f in files:
        try:
            req.files[f.name] = f.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BinaryContentError(
                f"{f.name} is not UTF-8 text; gists only support text files"
            ) from exc
    return req


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------

def _api_hostname(api_url: str) -> str:
    """Map an API URL to the host ``gh`` keys its tokens by."""
    host = urlparse(api_url).hostname or "github.com"
    if host == "api.github.com":
        return "github.com"
    return host


def resolve_token(api_url: str = DEFAULT_API_URL, *, gh: str = "gh") -> str:
    """Find a GitHub token for *api_url*.

    Checks ``GH_TOKEN`` and ``GITHUB_TOKEN`` first, then asks
    ``gh auth token`` for the API's host.
    """
    for var in _TOKEN_ENV_VARS:
        token = os.environ.get(var, "").strip()
        if token:
            return token

    host = _api_hostname(api_url)
    try:
        proc = subprocess.run(
            [gh, "auth", "token", "--hostname", host],
            capture_output=True, text=True, timeout=5,
        )
        token = proc.stdout.strip()
        if proc.returncode == 0 and token:
            return token
    except (OSError, subprocess.TimeoutExpired):
        pass

    raise GistCreateError(
        f"init GitHub client: no authentication token found for {host}; "
        f"run 'gh auth login' or set GH_TOKEN"
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def create_gist(
    request: GistRequest,
    *,
    token: str,
    api_url: str = DEFAULT_API_URL,
    client: httpx.Client | None = None,
) -> GistResult:
    """Create the gist with a single ``POST /gists`` call.

    A transport or HTTP failure raises :class:`GistCreateError`; a
    successful response lacking ``id`` or ``html_url`` raises
    :class:`IncompleteGistError`.
    """
    headers = dict(_API_HEADERS)
    headers["Authorization"] = f"Bearer {token}"
    url = f"{api_url.rstrip('/')}/gists"

    try:
        if client is None:
            with httpx.Client() as own_client:
                response = own_client.post(url, headers=headers, json=request.to_json())
        else:
            response = client.post(url, headers=headers, json=request.to_json())
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as exc:
        raise GistCreateError(
            f"create gist via GitHub API: HTTP {exc.response.status_code}: "
            f"{exc.response.text.strip()}"
        ) from exc
    except httpx.HTTPError as exc:
        raise GistCreateError(f"create gist via GitHub API: {exc}") from exc
    except ValueError as exc:
        raise GistCreateError(f"create gist via GitHub API: invalid response body: {exc}") from exc

    gist_id = data.get("id") if isinstance(data, dict) else None
    html_url = data.get("html_url") if isinstance(data, dict) else None
    if not gist_id or not html_url:
        raise IncompleteGistError("GitHub API returned an incomplete gist response")
    return GistResult(id=str(gist_id), url=str(html_url))
