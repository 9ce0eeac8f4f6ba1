"""Execution planning: dependency closure and topological order.

``plan`` never runs anything. It is safe to call for ``shipit plan`` and
it is the first thing the executor does, so unknown names and cycles are
reported before any side effect.
"""

from __future__ import annotations

import heapq

from shipit.core.pipeline_errors import CyclicDependency, UnknownTarget
from shipit.core.result import Err, Ok, Result
from shipit.graph.registry import TargetGraph

__all__ = ["PlanError", "plan"]

type PlanError = UnknownTarget | CyclicDependency


def _closure(graph: TargetGraph, requested: str) -> Result[set[str], UnknownTarget]:
    """All targets reachable from ``requested`` over dependency edges (inclusive)."""
    if requested not in graph:
        return Err(UnknownTarget(name=requested, available=graph.names()))

    seen: set[str] = set()
    stack = [requested]
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        target = graph.get(name)
        assert target is not None
        for dep in target.depends_on:
            if dep not in graph:
                return Err(UnknownTarget(name=dep, available=graph.names(), required_by=name))
            stack.append(dep)
    return Ok(seen)


def _find_cycle(graph: TargetGraph, nodes: set[str]) -> tuple[str, ...]:
    """Return one cycle among ``nodes`` as a closed path (a, b, a)."""
    ordered = sorted(nodes, key=graph.declaration_index)
    for start in ordered:
        path: list[str] = [start]
        on_path = {start}
        while path:
            target = graph.get(path[-1])
            assert target is not None
            nxt = next((d for d in target.depends_on if d in nodes), None)
            if nxt is None:
                break
            if nxt in on_path:
                return (*path[path.index(nxt) :], nxt)
            path.append(nxt)
            on_path.add(nxt)
    return tuple(ordered)


def plan(graph: TargetGraph, requested: str) -> Result[tuple[str, ...], PlanError]:
    """Order the closure of ``requested``: dependencies before dependents.

    Ties are broken by declaration order, so the result is the same for
    the same declarations.
    """
    closure = _closure(graph, requested)
    if isinstance(closure, Err):
        return closure
    nodes = closure.value

    dependents: dict[str, list[str]] = {n: [] for n in nodes}
    indeg: dict[str, int] = {n: 0 for n in nodes}
    for name in nodes:
        target = graph.get(name)
        assert target is not None
        for dep in dict.fromkeys(target.depends_on):
            dependents[dep].append(name)
            indeg[name] += 1

    ready = [(graph.declaration_index(n), n) for n, d in indeg.items() if d == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        _, name = heapq.heappop(ready)
        order.append(name)
        for child in dependents[name]:
            indeg[child] -= 1
            if indeg[child] == 0:
                heapq.heappush(ready, (graph.declaration_index(child), child))

    if len(order) != len(nodes):
        stuck = {n for n, d in indeg.items() if d > 0}
        return Err(CyclicDependency(targets=_find_cycle(graph, stuck)))

    return Ok(tuple(order))
