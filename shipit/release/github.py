"""GitHub release publication.

One REST call per release:

    POST https://api.github.com/repos/{owner}/{name}/releases
    {"tag_name": ..., "target_commitish": ..., "name": ..., "body": ...}
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from shipit.core.pipeline_errors import ReleasePublishError
from shipit.core.result import Err, Ok, Result
from shipit.core.structured import as_str_dict, get_str
from shipit.tools.http import HttpClient

__all__ = [
    "GITHUB_API_URL",
    "RepositoryCoordinates",
    "publish_release",
    "repository_coordinates",
]

GITHUB_API_URL = "https://api.github.com"

_REMOTE_RE = re.compile(
    r"^(?:https?://(?:[^@/]+@)?github\.com/|git@github\.com:|ssh://git@github\.com/)"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)


@dataclass(frozen=True, slots=True)
class RepositoryCoordinates:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


def repository_coordinates(remote_url: str) -> Result[RepositoryCoordinates, str]:
    """Parse owner/name from an https or ssh GitHub remote URL."""
    m = _REMOTE_RE.match(remote_url.strip())
    if m is None:
        return Err(f"not a GitHub remote: {remote_url}")
    return Ok(RepositoryCoordinates(owner=m.group("owner"), name=m.group("name")))


def publish_release(
    http: HttpClient,
    *,
    tag: str,
    commit: str,
    notes: str,
    repository: RepositoryCoordinates,
    token: str,
    api_url: str = GITHUB_API_URL,
) -> Result[str, ReleasePublishError]:
    """Create the release; returns its html_url (or the API URL if absent)."""
    url = f"{api_url}/repos/{repository.owner}/{repository.name}/releases"
    payload = {
        "tag_name": tag,
        "target_commitish": commit,
        "name": tag,
        "body": notes,
    }
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }

    result = http.post_json(url, payload, headers)
    if isinstance(result, Err):
        return Err(ReleasePublishError(tag=tag, status=0, message=result.error.message))

    response = result.value
    if not response.is_success:
        return Err(ReleasePublishError(tag=tag, status=response.status, message=response.body))

    try:
        data = as_str_dict(json.loads(response.body))
    except json.JSONDecodeError:
        data = None
    html_url = get_str(data, "html_url") if data else None
    return Ok(html_url or url)
