from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from shipit.core.config import (
    ConfigError,
    DefaultSource,
    EnvironmentSource,
    FileSource,
    FlagSource,
    SecretFileSource,
    ValueSource,
    parse_param_flags,
    resolve,
)
from shipit.core.errors import ErrorCode
from shipit.core.project import Project, ProjectFile, find_project_root, load_project_file
from shipit.core.result import Err, Ok, Result
from shipit.core.version import VersionDescriptor, derive_version
from shipit.git.repository import GitError, Repository
from shipit.graph.registry import TargetGraph
from shipit.output.console import ConsoleProtocol, RichConsole
from shipit.targets import PARAMETER_DEFAULTS, build_graph

_VERSION_KEYS = ("version", "branch", "commit", "release_branch")


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    settings: ProjectFile
    flags: dict[str, str]
    console: ConsoleProtocol


def build_context(*, root: Path | None, params: list[str]) -> CLIContext:
    console = RichConsole()

    flags = parse_param_flags(params)
    if isinstance(flags, Err):
        console.error(flags.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    project_root = root.expanduser().resolve() if root else find_project_root(Path.cwd())
    if not project_root.is_dir():
        console.error(f"project root not found: {project_root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    project = Project(root=project_root)
    settings = load_project_file(project.config_path)
    if isinstance(settings, Err):
        console.error(settings.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(project=project, settings=settings.value, flags=flags.value, console=console)


def plain_sources(ctx: CLIContext, environ: Mapping[str, str] | None = None) -> list[ValueSource]:
    """Flag, environment, project file and defaults; no secret store."""
    return [
        FlagSource(ctx.flags),
        EnvironmentSource(os.environ if environ is None else environ),
        FileSource(ctx.settings.params),
        DefaultSource(PARAMETER_DEFAULTS),
    ]


def value_sources(
    ctx: CLIContext,
    environ: Mapping[str, str] | None = None,
) -> Result[list[ValueSource], ConfigError]:
    """All sources in precedence order, secret store before defaults."""
    store = SecretFileSource.load(
        ctx.project.root / ctx.settings.secrets_file,
        ctx.settings.secret_aliases,
    )
    if isinstance(store, Err):
        return store

    sources = plain_sources(ctx, environ)
    sources.insert(3, store.value)
    return Ok(sources)


def run_version(
    ctx: CLIContext,
    environ: Mapping[str, str] | None = None,
) -> Result[VersionDescriptor, GitError]:
    snapshot = resolve(plain_sources(ctx, environ), _VERSION_KEYS)
    overrides = {key: value for key in _VERSION_KEYS if (value := snapshot.get(key))}
    return derive_version(
        Repository(ctx.project.root),
        overrides,
        release_branch=overrides.get("release_branch", PARAMETER_DEFAULTS["release_branch"]),
    )


def upload_timeout(ctx: CLIContext, environ: Mapping[str, str] | None = None) -> float | None:
    raw = resolve(plain_sources(ctx, environ), ("upload_timeout",)).get("upload_timeout")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        ctx.console.error(f"upload_timeout must be a number of seconds, got '{raw}'")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))


def graph_or_exit(console: ConsoleProtocol) -> TargetGraph:
    graph = build_graph()
    if isinstance(graph, Err):
        console.error(f"target declared twice: {graph.error.name}")
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
    return graph.value
