"""Tests for shipit.graph.registry module."""

from __future__ import annotations

from shipit.core.pipeline_errors import DuplicateTarget
from shipit.core.result import Err, Ok
from shipit.graph.registry import TargetGraph
from shipit.graph.target import Target


def _noop(_ctx: object) -> Ok[None]:
    return Ok(None)


class TestTargetGraph:
    def test_declaration_order(self) -> None:
        graph = TargetGraph.of([Target("b", _noop), Target("a", _noop)]).unwrap()
        assert graph.names() == ("b", "a")
        assert graph.declaration_index("a") == 1
        assert [t.name for t in graph] == ["b", "a"]
        assert len(graph) == 2

    def test_duplicate_name_rejected(self) -> None:
        result = TargetGraph.of([Target("clean", _noop), Target("clean", _noop)])
        assert result == Err(DuplicateTarget(name="clean"))

    def test_register_keeps_first(self) -> None:
        graph = TargetGraph()
        first = Target("clean", _noop, description="first")
        graph.register(first)
        assert isinstance(graph.register(Target("clean", _noop)), Err)
        assert graph["clean"] is first

    def test_lookup(self) -> None:
        graph = TargetGraph.of([Target("clean", _noop)]).unwrap()
        assert "clean" in graph
        assert "deploy" not in graph
        assert graph.get("deploy") is None
