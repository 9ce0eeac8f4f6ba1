"""Tests for shipit.graph.planner module."""

from __future__ import annotations

from shipit.core.pipeline_errors import CyclicDependency, UnknownTarget
from shipit.core.result import Err, Ok
from shipit.graph.planner import plan
from shipit.graph.registry import TargetGraph
from shipit.graph.target import Target


def _noop(_ctx: object) -> Ok[None]:
    return Ok(None)


def _graph(*targets: Target) -> TargetGraph:
    return TargetGraph.of(targets).unwrap()


class TestPlan:
    def test_single_target(self) -> None:
        assert plan(_graph(Target("clean", _noop)), "clean") == Ok(("clean",))

    def test_dependencies_first(self) -> None:
        graph = _graph(
            Target("deploy", _noop, depends_on=("clean",)),
            Target("clean", _noop),
        )
        assert plan(graph, "deploy") == Ok(("clean", "deploy"))

    def test_only_closure_is_planned(self) -> None:
        graph = _graph(
            Target("clean", _noop),
            Target("test", _noop, depends_on=("clean",)),
            Target("deploy", _noop, depends_on=("clean",)),
            Target("release", _noop),
        )
        assert plan(graph, "test") == Ok(("clean", "test"))

    def test_shared_dependency_once(self) -> None:
        """A diamond runs its base once."""
        graph = _graph(
            Target("clean", _noop),
            Target("build", _noop, depends_on=("clean",)),
            Target("test", _noop, depends_on=("clean",)),
            Target("all", _noop, depends_on=("build", "test")),
        )
        assert plan(graph, "all") == Ok(("clean", "build", "test", "all"))

    def test_ties_follow_declaration_order(self) -> None:
        graph = _graph(
            Target("z", _noop),
            Target("a", _noop),
            Target("top", _noop, depends_on=("a", "z")),
        )
        assert plan(graph, "top") == Ok(("z", "a", "top"))

    def test_same_result_every_time(self) -> None:
        graph = _graph(
            Target("clean", _noop),
            Target("b", _noop, depends_on=("clean",)),
            Target("a", _noop, depends_on=("clean",)),
            Target("top", _noop, depends_on=("a", "b")),
        )
        first = plan(graph, "top")
        assert all(plan(graph, "top") == first for _ in range(10))

    def test_unknown_requested(self) -> None:
        result = plan(_graph(Target("clean", _noop)), "deplyo")
        assert result == Err(UnknownTarget(name="deplyo", available=("clean",)))

    def test_unknown_dependency(self) -> None:
        graph = _graph(Target("deploy", _noop, depends_on=("build",)))
        result = plan(graph, "deploy")
        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownTarget)
        assert result.error.name == "build"
        assert result.error.required_by == "deploy"

    def test_cycle(self) -> None:
        graph = _graph(
            Target("a", _noop, depends_on=("b",)),
            Target("b", _noop, depends_on=("a",)),
        )
        result = plan(graph, "a")
        assert isinstance(result, Err)
        assert isinstance(result.error, CyclicDependency)
        assert result.error.targets == ("a", "b", "a")

    def test_self_cycle(self) -> None:
        graph = _graph(Target("a", _noop, depends_on=("a",)))
        assert plan(graph, "a") == Err(CyclicDependency(targets=("a", "a")))
