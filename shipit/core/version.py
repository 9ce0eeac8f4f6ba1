"""Version descriptor derived once per run from repository state.

The semantic version follows the nearest ``vMAJOR.MINOR.PATCH`` tag:

- HEAD exactly on ``v1.2.0``            -> ``1.2.0``
- HEAD exactly on ``v1.2.0-rc.1``       -> ``1.2.0-rc.1``
- 5 commits past ``v1.2.0`` on master   -> ``1.2.1-ci.5``
- 5 commits past ``v1.2.0`` on feature  -> ``1.2.1-feature.5``
- no tag yet                            -> ``0.1.0-<label>.0``

``version``, ``branch`` and ``commit`` parameters override what git reports,
which is how CI systems with a detached HEAD pass the real branch name.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from shipit.core.result import Err, Ok, Result
from shipit.git.repository import GitError, Repository

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)(?P<suffix>[-+].+)?$"
)
_LABEL_RE = re.compile(r"[^0-9A-Za-z-]+")

__all__ = ["VersionDescriptor", "derive_version", "release_branch_names"]


@dataclass(frozen=True, slots=True)
class VersionDescriptor:
    """Version facts shared by packaging, publishing and release tagging."""

    branch: str
    sha: str
    semver: str
    major_minor_patch: str

    @property
    def tag(self) -> str:
        return f"v{self.major_minor_patch}"

    def on_branch(self, name: str) -> bool:
        """True if the branch is ``name`` or its ``origin/`` form."""
        return self.branch in release_branch_names(name)


def release_branch_names(name: str) -> tuple[str, str]:
    name = name.removeprefix("origin/")
    return (name, f"origin/{name}")


def _prerelease_label(branch: str, release_branch: str) -> str:
    if branch in release_branch_names(release_branch):
        return "ci"
    label = _LABEL_RE.sub("-", branch.removeprefix("origin/").split("/")[-1]).strip("-")
    return label or "ci"


def compute_semver(
    tag: str | None,
    distance: int,
    *,
    branch: str,
    release_branch: str,
) -> tuple[str, str]:
    """Return ``(semver, major_minor_patch)`` for a tag and commit distance."""
    label = _prerelease_label(branch, release_branch)
    m = _SEMVER_RE.match(tag) if tag else None
    if m is None:
        return (f"0.1.0-{label}.{distance}", "0.1.0")

    major, minor, patch = int(m.group("major")), int(m.group("minor")), int(m.group("patch"))
    if distance == 0:
        mmp = f"{major}.{minor}.{patch}"
        return (f"{mmp}{m.group('suffix') or ''}", mmp)

    mmp = f"{major}.{minor}.{patch + 1}"
    return (f"{mmp}-{label}.{distance}", mmp)


def derive_version(
    repo: Repository,
    overrides: Mapping[str, str],
    *,
    release_branch: str = "master",
) -> Result[VersionDescriptor, GitError]:
    """Build the descriptor from git, letting explicit overrides win."""
    branch = overrides.get("branch")
    if not branch:
        branch_result = repo.current_branch()
        if isinstance(branch_result, Err):
            return branch_result
        branch = branch_result.value

    sha = overrides.get("commit")
    if not sha:
        sha_result = repo.head_sha()
        if isinstance(sha_result, Err):
            return sha_result
        sha = sha_result.value

    version = overrides.get("version")
    if version:
        m = _SEMVER_RE.match(version)
        if m is None:
            return Err(GitError(command="version", message=f"not a semantic version: {version}"))
        mmp = f"{m.group('major')}.{m.group('minor')}.{m.group('patch')}"
        return Ok(VersionDescriptor(branch, sha, version.removeprefix("v"), mmp))

    described = repo.describe()
    if isinstance(described, Err):
        return described

    desc = described.value
    semver, mmp = compute_semver(
        desc.tag if desc else None,
        desc.distance if desc else 0,
        branch=branch,
        release_branch=release_branch,
    )
    return Ok(VersionDescriptor(branch=branch, sha=sha, semver=semver, major_minor_patch=mmp))
