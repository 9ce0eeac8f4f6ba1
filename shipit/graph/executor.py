"""Sequential execution of a planned target graph.

The executor:

1. plans the closure of the requested target (unknown names and cycles
   fail here, before anything runs);
2. resolves one configuration snapshot for the keys the planned targets
   reference;
3. checks every planned target's required values, in execution order,
   before any action runs;
4. runs each target once, in order: a false activation predicate marks
   it skipped and execution continues; an action that returns an error
   or raises marks it failed and stops the run.

Nothing is retried and nothing is rolled back.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from shipit.core.config import ConfigSnapshot, ValueSource, resolve
from shipit.core.pipeline_errors import (
    ActionRaised,
    Interrupted,
    PipelineError,
    RequirementNotMet,
    StepError,
    TargetFailed,
)
from shipit.core.result import Err
from shipit.graph.planner import plan
from shipit.graph.registry import TargetGraph
from shipit.graph.target import Target, TargetContext
from shipit.output.console import ConsoleProtocol, Style
from shipit.output.errors import describe_step_error

__all__ = ["GraphExecutor", "RunReport", "TargetResult", "TargetStatus"]


class TargetStatus(Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TargetResult:
    name: str
    status: TargetStatus
    error: PipelineError | None = None
    warnings: tuple[StepError, ...] = ()


@dataclass(frozen=True, slots=True)
class RunReport:
    """Outcome of one ``run``.

    ``order`` is the full plan; ``results`` holds only the targets the
    executor visited, in the order it visited them.
    """

    requested: str
    order: tuple[str, ...]
    results: tuple[TargetResult, ...]
    error: PipelineError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def status_of(self, name: str) -> TargetStatus | None:
        for result in self.results:
            if result.name == name:
                return result.status
        return None

    def classification(self) -> tuple[tuple[str, TargetStatus], ...]:
        return tuple((r.name, r.status) for r in self.results)

    @property
    def warnings(self) -> tuple[tuple[str, StepError], ...]:
        return tuple((r.name, w) for r in self.results for w in r.warnings)


type ContextFactory = Callable[[ConfigSnapshot], TargetContext]


class GraphExecutor:
    """Runs targets of a ``TargetGraph`` one at a time."""

    def __init__(self, graph: TargetGraph, *, console: ConsoleProtocol) -> None:
        self._graph = graph
        self._console = console

    def _targets(self, order: Sequence[str]) -> list[Target]:
        return [self._graph[name] for name in order]

    def run(
        self,
        requested: str,
        *,
        sources: Sequence[ValueSource],
        context_factory: ContextFactory,
    ) -> RunReport:
        planned = plan(self._graph, requested)
        if isinstance(planned, Err):
            return RunReport(requested=requested, order=(), results=(), error=planned.error)

        order = planned.value
        targets = self._targets(order)
        keys = [key for t in targets for key in t.config_keys()]
        snapshot = resolve(sources, keys)

        for target in targets:
            unmet = target.first_unmet(snapshot)
            if unmet is not None:
                error = RequirementNotMet(target=target.name, key=unmet.key, reason=unmet.reason)
                return RunReport(
                    requested=requested,
                    order=order,
                    results=(TargetResult(target.name, TargetStatus.FAILED, error),),
                    error=error,
                )

        ctx = context_factory(snapshot)
        results: list[TargetResult] = []

        for target in targets:
            result = self._run_target(target, ctx.for_target(target.name))
            results.append(result)
            if result.status == TargetStatus.FAILED:
                return RunReport(
                    requested=requested,
                    order=order,
                    results=tuple(results),
                    error=result.error,
                )

        return RunReport(requested=requested, order=order, results=tuple(results))

    def _run_target(self, target: Target, ctx: TargetContext) -> TargetResult:
        self._console.header(f"> {target.name}")

        if target.only_when is not None and not target.only_when(ctx):
            self._console.print(f"skipped: {target.only_when.name} is false", Style.DIM)
            return TargetResult(target.name, TargetStatus.SKIPPED)

        try:
            outcome = target.action(ctx)
        except KeyboardInterrupt:
            self._console.warning(
                f"{target.name} interrupted; external side effects already made "
                "(uploads, publishes) are not rolled back"
            )
            return TargetResult(target.name, TargetStatus.FAILED, Interrupted(target=target.name))
        except Exception as e:  # noqa: BLE001
            raised = ActionRaised(exception=type(e).__name__, message=str(e))
            return TargetResult(
                target.name,
                TargetStatus.FAILED,
                TargetFailed(target=target.name, cause=raised),
            )

        if isinstance(outcome, Err):
            return TargetResult(
                target.name,
                TargetStatus.FAILED,
                TargetFailed(target=target.name, cause=outcome.error),
            )

        for warning in ctx.warnings:
            self._console.warning(f"{target.name}: {describe_step_error(warning)}")
        self._console.success(target.name)
        return TargetResult(target.name, TargetStatus.SUCCEEDED, warnings=tuple(ctx.warnings))
