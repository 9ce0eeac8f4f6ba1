"""Error kinds produced while planning and running targets.

Each kind is a frozen value; ``PipelineError`` is the union the executor,
the deploy pipeline and the release steps return inside ``Err``.
Rendering and exit-code mapping live in ``shipit.output.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DuplicateTarget:
    name: str


@dataclass(frozen=True, slots=True)
class UnknownTarget:
    name: str
    available: tuple[str, ...]
    required_by: str | None = None


@dataclass(frozen=True, slots=True)
class CyclicDependency:
    """Targets that could not be ordered (each sits on or behind a cycle)."""

    targets: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class RequirementNotMet:
    target: str
    key: str
    reason: str = "missing"


@dataclass(frozen=True, slots=True)
class BuildFailed:
    command: tuple[str, ...]
    returncode: int
    stderr: str = ""


@dataclass(frozen=True, slots=True)
class PackagingError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class UploadFailed:
    """zip-deploy was rejected (non-2xx) or never reached the endpoint (status 0)."""

    url: str
    status: int
    body: str


@dataclass(frozen=True, slots=True)
class NotificationFailed:
    url: str
    status: int
    message: str


@dataclass(frozen=True, slots=True)
class SectionNotFound:
    """No matching section, or (with ``reason``) the changelog could not be read."""

    section: str | None
    source: Path | None = None
    reason: str = ""


@dataclass(frozen=True, slots=True)
class ReleasePublishError:
    tag: str
    status: int
    message: str


@dataclass(frozen=True, slots=True)
class Interrupted:
    target: str


@dataclass(frozen=True, slots=True)
class ActionRaised:
    """A target body raised instead of returning an error."""

    exception: str
    message: str


type StepError = (
    BuildFailed
    | PackagingError
    | UploadFailed
    | NotificationFailed
    | SectionNotFound
    | ReleasePublishError
    | RequirementNotMet
    | ActionRaised
)


@dataclass(frozen=True, slots=True)
class TargetFailed:
    """A target action failed; ``cause`` is what it returned or raised."""

    target: str
    cause: StepError


type PipelineError = (
    DuplicateTarget
    | UnknownTarget
    | CyclicDependency
    | RequirementNotMet
    | TargetFailed
    | Interrupted
)
