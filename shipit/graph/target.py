"""Target definitions: dependencies, required values, activation predicates.

A target is declared once and never mutated:

    Target(
        name="release",
        action=publish_release,
        requires=(required("github_token"),),
        only_when=branch_is("release_branch"),
    )

Requirements and predicates are plain values so they can be tested
without running any target body.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shipit.core.config import ConfigSnapshot
from shipit.core.pipeline_errors import StepError
from shipit.core.result import Result
from shipit.platform.process import CommandRunner, run_silent

if TYPE_CHECKING:
    from shipit.core.project import Project, ProjectFile
    from shipit.core.version import VersionDescriptor
    from shipit.output.console import ConsoleProtocol
    from shipit.tools.http import HttpClient

__all__ = [
    "Action",
    "Predicate",
    "Requirement",
    "Target",
    "TargetContext",
    "branch_is",
    "is_present",
    "required",
]


@dataclass
class TargetContext:
    """Everything a target body may touch.

    One context is built per run from the resolved snapshot; the executor
    hands each target its own copy via ``for_target`` so warnings are
    collected per target.
    """

    project: Project
    settings: ProjectFile
    config: ConfigSnapshot
    version: VersionDescriptor
    console: ConsoleProtocol
    http: HttpClient
    runner: CommandRunner = run_silent
    target: str = ""
    warnings: list[StepError] = field(default_factory=list)

    def for_target(self, name: str) -> TargetContext:
        return dataclasses.replace(self, target=name, warnings=[])

    def warn(self, error: StepError) -> None:
        """Record a non-fatal error; the target still succeeds."""
        self.warnings.append(error)


type Action = Callable[[TargetContext], Result[None, StepError]]


def is_present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


@dataclass(frozen=True, slots=True)
class Requirement:
    """A configuration key that must pass ``validator`` before the target runs."""

    key: str
    validator: Callable[[str | None], bool] = is_present
    reason: str = "missing"

    def check(self, config: ConfigSnapshot) -> bool:
        return self.validator(config.get(self.key))


def required(
    key: str,
    validator: Callable[[str | None], bool] | None = None,
    *,
    reason: str | None = None,
) -> Requirement:
    if validator is None:
        return Requirement(key)
    return Requirement(key, validator, reason or "invalid")


@dataclass(frozen=True, slots=True)
class Predicate:
    """Named boolean condition over the run context.

    ``keys`` lists the configuration keys the predicate reads so the
    resolver fetches them along with the target's own keys.
    """

    name: str
    test: Callable[[TargetContext], bool]
    keys: tuple[str, ...] = ()

    def __call__(self, ctx: TargetContext) -> bool:
        return bool(self.test(ctx))

    def __and__(self, other: Predicate) -> Predicate:
        return Predicate(
            f"{self.name} and {other.name}",
            lambda ctx: self(ctx) and other(ctx),
            (*self.keys, *other.keys),
        )

    def __invert__(self) -> Predicate:
        return Predicate(f"not {self.name}", lambda ctx: not self(ctx), self.keys)


def branch_is(key: str = "release_branch", default: str = "master") -> Predicate:
    """True when the current branch equals the branch named by ``key``.

    ``origin/<branch>`` counts as the same branch.
    """

    def test(ctx: TargetContext) -> bool:
        return ctx.version.on_branch(ctx.config.get(key) or default)

    return Predicate(f"branch is {key}", test, (key,))


@dataclass(frozen=True, slots=True)
class Target:
    """A named unit of work in the pipeline.

    Attributes:
        name: Unique target name
        action: Body; returns Ok(None) or Err(StepError)
        depends_on: Targets that must run first
        requires: Values that must be present before the action runs
        only_when: Activation predicate; None means always active
        parameters: Optional keys the body reads besides its requirements
        description: One line for ``shipit list``
    """

    name: str
    action: Action
    depends_on: tuple[str, ...] = ()
    requires: tuple[Requirement, ...] = ()
    only_when: Predicate | None = None
    parameters: tuple[str, ...] = ()
    description: str = ""

    def config_keys(self) -> tuple[str, ...]:
        keys = [r.key for r in self.requires]
        keys.extend(self.parameters)
        if self.only_when is not None:
            keys.extend(self.only_when.keys)
        return tuple(dict.fromkeys(keys))

    def first_unmet(self, config: ConfigSnapshot) -> Requirement | None:
        for requirement in self.requires:
            if not requirement.check(config):
                return requirement
        return None
