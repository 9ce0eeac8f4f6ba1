"""Read-only git queries used to derive the version descriptor.

Usage:
    repo = Repository(project.root)
    match repo.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from shipit.core.result import Err, Ok, Result
from shipit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

# v1.2.3-4-gabcdef0 as printed by `git describe --tags --long`
_DESCRIBE_RE = re.compile(r"^(?P<tag>.+)-(?P<distance>\d+)-g(?P<sha>[0-9a-f]+)$")

__all__ = ["GitError", "Repository", "TagDescription"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git command.

    Attributes:
        command: The git subcommand that failed
        message: stderr of the command, or a fallback message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class TagDescription:
    """Nearest reachable tag and how many commits HEAD is past it."""

    tag: str
    distance: int


class Repository:
    """Git queries against a single working copy."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _git(self, args: list[str]) -> Result[str, GitError]:
        result = run_process(["git", *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=args[0],
                        message=e.stderr.strip() or f"git {args[0]} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def current_branch(self) -> Result[str, GitError]:
        """Branch name of HEAD ("HEAD" when detached)."""
        return self._git(["rev-parse", "--abbrev-ref", "HEAD"])

    def head_sha(self) -> Result[str, GitError]:
        return self._git(["rev-parse", "HEAD"])

    def describe(self, match: str = "v[0-9]*") -> Result[TagDescription | None, GitError]:
        """Describe HEAD relative to the nearest version tag.

        Returns Ok(None) when the repository has no matching tag yet.
        """
        result = self._git(["describe", "--tags", "--long", "--match", match])
        if isinstance(result, Err):
            message = result.error.message.lower()
            if "no names found" in message or "no tags can describe" in message:
                return Ok(None)
            return result

        m = _DESCRIBE_RE.match(result.value)
        if m is None:
            return Err(
                GitError(command="describe", message=f"unexpected describe output: {result.value}")
            )
        return Ok(TagDescription(tag=m.group("tag"), distance=int(m.group("distance"))))

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        return self._git(["remote", "get-url", remote])
