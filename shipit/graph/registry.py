"""Registry of declared targets, in declaration order."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from shipit.core.pipeline_errors import DuplicateTarget
from shipit.core.result import Err, Ok, Result
from shipit.graph.target import Target

__all__ = ["TargetGraph"]


class TargetGraph:
    """Named targets with their dependency edges.

    Declaration order is kept; the planner uses it to break ties between
    targets whose relative order is otherwise unconstrained.
    """

    def __init__(self) -> None:
        self._targets: dict[str, Target] = {}

    @classmethod
    def of(cls, targets: Iterable[Target]) -> Result[TargetGraph, DuplicateTarget]:
        graph = cls()
        for target in targets:
            result = graph.register(target)
            if isinstance(result, Err):
                return result
        return Ok(graph)

    def register(self, target: Target) -> Result[Target, DuplicateTarget]:
        if target.name in self._targets:
            return Err(DuplicateTarget(name=target.name))
        self._targets[target.name] = target
        return Ok(target)

    def get(self, name: str) -> Target | None:
        return self._targets.get(name)

    def __getitem__(self, name: str) -> Target:
        return self._targets[name]

    def names(self) -> tuple[str, ...]:
        return tuple(self._targets)

    def declaration_index(self, name: str) -> int:
        return list(self._targets).index(name)

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets.values())

    def __len__(self) -> int:
        return len(self._targets)
