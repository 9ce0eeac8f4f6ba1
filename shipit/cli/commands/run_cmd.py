"""Run command - execute a target and its dependencies."""

from __future__ import annotations

from pathlib import Path

import typer

from shipit.cli.context import (
    CLIContext,
    build_context,
    graph_or_exit,
    run_version,
    upload_timeout,
    value_sources,
)
from shipit.core.config import ConfigSnapshot
from shipit.core.errors import ErrorCode
from shipit.core.result import Err
from shipit.core.version import VersionDescriptor
from shipit.graph.executor import ContextFactory, GraphExecutor, RunReport, TargetStatus
from shipit.graph.target import TargetContext
from shipit.output.console import ConsoleProtocol, Style
from shipit.output.errors import pipeline_error_exit_code, print_pipeline_error
from shipit.platform.process import run_silent
from shipit.targets import DEFAULT_TARGET
from shipit.tools.http import HttpClient, RealHttpClient


def _print_summary(report: RunReport, console: ConsoleProtocol) -> None:
    console.newline()
    warned = {name for name, _ in report.warnings}
    for name, status in report.classification():
        match status:
            case TargetStatus.SUCCEEDED if name in warned:
                console.print(f"  {name}: {status} with warnings", Style.WARNING)
            case TargetStatus.SUCCEEDED:
                console.print(f"  {name}: {status}", Style.SUCCESS)
            case TargetStatus.SKIPPED:
                console.print(f"  {name}: {status}", Style.DIM)
            case TargetStatus.FAILED:
                console.print(f"  {name}: {status}", Style.ERROR)


def _context_factory(
    ctx: CLIContext,
    http: HttpClient,
    version: VersionDescriptor,
) -> ContextFactory:
    def make(snapshot: ConfigSnapshot) -> TargetContext:
        return TargetContext(
            project=ctx.project,
            settings=ctx.settings,
            config=snapshot,
            version=version,
            console=ctx.console,
            http=http,
            runner=run_silent,
        )

    return make


def run(
    target: str = typer.Argument(DEFAULT_TARGET, help="Target to run (with its dependencies)"),
    param: list[str] = typer.Option(
        [],
        "--param",
        "-p",
        help="Parameter as key=value (repeatable, overrides env and shipit.toml)",
    ),
    root: Path | None = typer.Option(None, "--root", help="Project root (default: auto-detect)"),
) -> None:
    """Run TARGET after everything it depends on."""
    ctx = build_context(root=root, params=param)
    console = ctx.console
    graph = graph_or_exit(console)

    sources = value_sources(ctx)
    if isinstance(sources, Err):
        console.error(sources.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    version = run_version(ctx)
    if isinstance(version, Err):
        console.error(f"cannot determine version: {version.error.message}")
        console.print("hint: pass --param version=... --param branch=... --param commit=...", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    v = version.value
    console.print(f"version {v.semver} ({v.branch} @ {v.sha[:7]})", Style.DIM)

    http = RealHttpClient(timeout=upload_timeout(ctx))
    executor = GraphExecutor(graph, console=console)
    report = executor.run(
        target,
        sources=sources.value,
        context_factory=_context_factory(ctx, http, v),
    )

    _print_summary(report, console)
    if report.error is not None:
        print_pipeline_error(report.error, console)
        raise typer.Exit(code=pipeline_error_exit_code(report.error))
