"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipit.core.config import env_name
from shipit.core.errors import ErrorCode
from shipit.core.pipeline_errors import (
    ActionRaised,
    BuildFailed,
    CyclicDependency,
    DuplicateTarget,
    Interrupted,
    NotificationFailed,
    PackagingError,
    PipelineError,
    ReleasePublishError,
    RequirementNotMet,
    SectionNotFound,
    StepError,
    TargetFailed,
    UnknownTarget,
    UploadFailed,
)
from shipit.output.console import Style

if TYPE_CHECKING:
    from shipit.output.console import ConsoleProtocol

__all__ = [
    "describe_step_error",
    "pipeline_error_exit_code",
    "print_pipeline_error",
]


def describe_step_error(error: StepError) -> str:
    """One-line description of what a target body reported."""
    match error:
        case BuildFailed(command=command, returncode=rc):
            return f"{' '.join(command)} failed (exit {rc})"
        case PackagingError(path=path, reason=reason):
            return f"packaging failed: {reason} ({path})"
        case UploadFailed(url=url, status=0, body=body):
            return f"deployment to {url} failed: {body}"
        case UploadFailed(url=url, status=status, body=body):
            return f"deployment returned status code {status} ({url}): {body}"
        case NotificationFailed(url=_, status=status, message=message):
            suffix = f" (HTTP {status})" if status else ""
            return f"notification could not be delivered{suffix}: {message}"
        case SectionNotFound(source=source, reason=reason) if reason:
            return f"cannot read changelog {source}: {reason}"
        case SectionNotFound(section=None, source=source):
            where = f" in {source}" if source else ""
            return f"no changelog section found{where}"
        case SectionNotFound(section=section, source=source):
            where = f" in {source}" if source else ""
            return f"changelog section '{section}' not found{where}"
        case ReleasePublishError(tag=tag, status=status, message=message):
            code = f" (HTTP {status})" if status else ""
            return f"release {tag} could not be published{code}: {message}"
        case RequirementNotMet(target=target, key=key, reason=reason):
            return f"{target}: required value '{key}' is {reason}"
        case ActionRaised(exception=exception, message=message):
            return f"unexpected {exception}: {message}" if message else f"unexpected {exception}"
    return repr(error)


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    """Print a run-aborting error with the originating target name."""
    match error:
        case DuplicateTarget(name=name):
            console.error(f"target declared twice: {name}")
        case UnknownTarget(name=name, available=available, required_by=None):
            console.error(f"unknown target: {name}")
            if available:
                console.print(f"Available: {', '.join(available)}", Style.DIM)
        case UnknownTarget(name=name, required_by=required_by):
            console.error(f"target '{required_by}' depends on unknown target '{name}'")
        case CyclicDependency(targets=targets):
            console.error(f"dependency cycle: {' -> '.join(targets)}")
        case RequirementNotMet(target=target, key=key, reason=reason):
            console.error(f"[{target}] required value '{key}' is {reason}")
            console.print(
                f"hint: pass --param {key}=... or set {env_name(key)}",
                Style.DIM,
            )
        case TargetFailed(target=target, cause=cause):
            console.error(f"[{target}] {describe_step_error(cause)}")
        case Interrupted(target=target):
            console.error(f"[{target}] interrupted")
            console.print(
                "hint: partial external side effects (half-uploaded artifacts, "
                "published packages) must be cleaned up manually",
                Style.DIM,
            )


def pipeline_error_exit_code(error: PipelineError) -> int:
    match error:
        case UnknownTarget(required_by=None):
            return int(ErrorCode.USER_ERROR)
        case DuplicateTarget() | CyclicDependency() | UnknownTarget() | RequirementNotMet():
            return int(ErrorCode.CONFIG_ERROR)
        case Interrupted():
            return int(ErrorCode.INTERRUPTED)
        case TargetFailed(cause=UploadFailed() | ReleasePublishError() | NotificationFailed()):
            return int(ErrorCode.NETWORK_ERROR)
        case TargetFailed(cause=SectionNotFound(reason=reason)) if reason:
            return int(ErrorCode.IO_ERROR)
        case TargetFailed(cause=PackagingError()):
            return int(ErrorCode.IO_ERROR)
        case TargetFailed(cause=RequirementNotMet()):
            return int(ErrorCode.CONFIG_ERROR)
        case TargetFailed():
            return int(ErrorCode.BUILD_ERROR)
    return int(ErrorCode.BUILD_ERROR)
