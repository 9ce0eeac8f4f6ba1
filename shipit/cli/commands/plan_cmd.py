"""Plan command - show execution order and required values without running."""

from __future__ import annotations

from pathlib import Path

import typer

from shipit.cli.context import build_context, graph_or_exit, value_sources
from shipit.core.config import resolve
from shipit.core.errors import ErrorCode
from shipit.core.result import Err
from shipit.graph.planner import plan as plan_targets
from shipit.output.console import Style
from shipit.output.errors import pipeline_error_exit_code, print_pipeline_error
from shipit.targets import DEFAULT_TARGET


def plan(
    target: str = typer.Argument(DEFAULT_TARGET, help="Target to plan"),
    param: list[str] = typer.Option([], "--param", "-p", help="Parameter as key=value (repeatable)"),
    root: Path | None = typer.Option(None, "--root", help="Project root (default: auto-detect)"),
) -> None:
    """Show the order TARGET would run in and where each value comes from."""
    ctx = build_context(root=root, params=param)
    console = ctx.console
    graph = graph_or_exit(console)

    planned = plan_targets(graph, target)
    if isinstance(planned, Err):
        print_pipeline_error(planned.error, console)
        raise typer.Exit(code=pipeline_error_exit_code(planned.error))

    sources = value_sources(ctx)
    if isinstance(sources, Err):
        console.error(sources.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    targets = [graph[name] for name in planned.value]
    snapshot = resolve(sources.value, [k for t in targets for k in t.config_keys()])

    missing = 0
    for index, t in enumerate(targets, start=1):
        console.header(f"{index}. {t.name}")
        if t.only_when is not None:
            console.print(f"   only when {t.only_when.name}", Style.DIM)
        for requirement in t.requires:
            source = snapshot.source_of(requirement.key)
            if source is not None and requirement.check(snapshot):
                console.print(f"   {requirement.key}: from {source}", Style.SUCCESS)
            else:
                missing += 1
                console.print(f"   {requirement.key}: {requirement.reason}", Style.ERROR)
        for key in t.parameters:
            source = snapshot.source_of(key)
            console.print(f"   {key}: {f'from {source}' if source else 'not set'}", Style.DIM)

    if missing:
        console.newline()
        console.warning(f"{missing} required value(s) missing; run would stop before the first target")
