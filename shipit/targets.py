"""The release targets of a web project.

    clean ─┬─> test
           ├─> publish
           └─> deploy        (requires deploy credentials + webhook)
    release                  (requires github_token, master only)

``clean`` is the default target.
"""

from __future__ import annotations

import shutil

from shipit.core.pipeline_errors import (
    BuildFailed,
    DuplicateTarget,
    PackagingError,
    ReleasePublishError,
    StepError,
)
from shipit.core.result import Err, Ok, Result
from shipit.deploy.notify import DEFAULT_SENDER
from shipit.deploy.pipeline import DEFAULT_DEPLOY_HOST, DeployPipeline, DeployRequest
from shipit.git.repository import Repository
from shipit.graph.registry import TargetGraph
from shipit.graph.target import Target, TargetContext, branch_is, required
from shipit.output.console import Style
from shipit.release.changelog import assemble, extract_section, read_changelog
from shipit.release.github import RepositoryCoordinates, publish_release, repository_coordinates

__all__ = ["DEFAULT_TARGET", "PARAMETER_DEFAULTS", "TARGETS", "build_graph"]

DEFAULT_TARGET = "clean"

PARAMETER_DEFAULTS: dict[str, str] = {
    "release_branch": "master",
    "deploy_host": DEFAULT_DEPLOY_HOST,
    "notification_sender": DEFAULT_SENDER,
}

# Files npm publish ships next to the build output.
_PUBLISHED_FILES = ("README.md", "LICENSE.md", "CHANGELOG.md", "package.json")


def _run_commands(ctx: TargetContext, *commands: list[str], cwd_name: str = "") -> Result[None, StepError]:
    cwd = ctx.project.root / cwd_name if cwd_name else ctx.project.root
    for cmd in commands:
        ctx.console.print(" ".join(cmd), Style.DIM)
        result = ctx.runner(cmd, cwd)
        if isinstance(result, Err):
            e = result.error
            return Err(BuildFailed(command=e.command, returncode=e.returncode, stderr=e.stderr))
    return Ok(None)


def clean(ctx: TargetContext) -> Result[None, StepError]:
    root = ctx.project.root
    deploy = ctx.settings.deploy
    try:
        for directory in (
            ctx.project.dist_dir,
            root / deploy.site_dir / deploy.build_output,
            root / "coverage",
        ):
            if directory.is_dir():
                shutil.rmtree(directory)
        (root / "karma-results.xml").unlink(missing_ok=True)

        if ctx.project.output_dir.exists():
            shutil.rmtree(ctx.project.output_dir)
        ctx.project.output_dir.mkdir(parents=True)
    except OSError as e:
        return Err(PackagingError(path=root, reason=f"clean failed: {e}"))
    return Ok(None)


def run_tests(ctx: TargetContext) -> Result[None, StepError]:
    return _run_commands(ctx, ["npm", "ci"], ["npm", "run", "test:ci"])


def npm_dist_tag(ctx: TargetContext) -> str:
    """``latest`` from the release branch, ``next`` from anywhere else."""
    release_branch = ctx.config.get("release_branch") or PARAMETER_DEFAULTS["release_branch"]
    return "latest" if ctx.version.on_branch(release_branch) else "next"


def publish(ctx: TargetContext) -> Result[None, StepError]:
    built = _run_commands(ctx, ["npm", "ci"], ["npm", "run", "build"])
    if isinstance(built, Err):
        return built

    root = ctx.project.root
    dist = ctx.project.dist_dir
    if not dist.is_dir():
        return Err(PackagingError(path=dist, reason="build output directory not found"))
    try:
        for name in _PUBLISHED_FILES:
            if (root / name).is_file():
                shutil.copyfile(root / name, dist / name)
    except OSError as e:
        return Err(PackagingError(path=dist, reason=f"copy failed: {e}"))

    return _run_commands(
        ctx,
        ["npm", "version", ctx.version.semver, "--no-git-tag-version", "--allow-same-version"],
        ["npm", "publish", f"--tag={npm_dist_tag(ctx)}"],
        cwd_name=dist.name,
    )


def deploy(ctx: TargetContext) -> Result[None, StepError]:
    pipeline = DeployPipeline(
        project=ctx.project,
        settings=ctx.settings.deploy,
        http=ctx.http,
        console=ctx.console,
        runner=ctx.runner,
    )
    request = DeployRequest(
        app_service_name=ctx.config.expect("app_service_name"),
        username=ctx.config.expect("web_deploy_username"),
        password=ctx.config.expect("web_deploy_password"),
        webhook_url=ctx.config.expect("slack_webhook_url"),
        deploy_host=ctx.config.get("deploy_host") or DEFAULT_DEPLOY_HOST,
        sender=ctx.config.get("notification_sender") or DEFAULT_SENDER,
    )

    result = pipeline.run(request, ctx.version)
    if isinstance(result, Err):
        return result

    if result.value.notification_error is not None:
        ctx.warn(result.value.notification_error)
    return Ok(None)


def _coordinates(ctx: TargetContext, tag: str) -> Result[RepositoryCoordinates, ReleasePublishError]:
    remote = ctx.config.get("github_repository")
    if not remote:
        remote_result = Repository(ctx.project.root).remote_url()
        if isinstance(remote_result, Err):
            return Err(ReleasePublishError(tag=tag, status=0, message=remote_result.error.message))
        remote = remote_result.value
    elif "://" not in remote and not remote.startswith("git@"):
        remote = f"https://github.com/{remote}"

    parsed = repository_coordinates(remote)
    if isinstance(parsed, Err):
        return Err(ReleasePublishError(tag=tag, status=0, message=parsed.error))
    return Ok(parsed.value)


def release(ctx: TargetContext) -> Result[None, StepError]:
    tag = ctx.version.tag

    text = read_changelog(ctx.project.changelog_path)
    if isinstance(text, Err):
        return text
    section = extract_section(
        text.value,
        ctx.config.get("changelog_section"),
        source=ctx.project.changelog_path,
    )
    if isinstance(section, Err):
        return section
    notes = assemble(tag, section.value)

    coordinates = _coordinates(ctx, tag)
    if isinstance(coordinates, Err):
        return coordinates

    ctx.console.print(f"creating release {tag} on {coordinates.value.slug} at {ctx.version.sha}", Style.DIM)
    published = publish_release(
        ctx.http,
        tag=tag,
        commit=ctx.version.sha,
        notes=notes,
        repository=coordinates.value,
        token=ctx.config.expect("github_token"),
    )
    if isinstance(published, Err):
        return published
    ctx.console.print(published.value)
    return Ok(None)


TARGETS: tuple[Target, ...] = (
    Target(
        name="clean",
        action=clean,
        description="Remove build output and recreate output/",
    ),
    Target(
        name="test",
        action=run_tests,
        depends_on=("clean",),
        description="Install dependencies and run the test suite",
    ),
    Target(
        name="publish",
        action=publish,
        depends_on=("clean",),
        parameters=("release_branch",),
        description="Build and publish the npm package (latest on the release branch, else next)",
    ),
    Target(
        name="deploy",
        action=deploy,
        depends_on=("clean",),
        requires=(
            required("web_deploy_username"),
            required("web_deploy_password"),
            required("app_service_name"),
            required("slack_webhook_url"),
        ),
        parameters=("deploy_host", "notification_sender"),
        description="Build the demo site, zip-deploy it and send a notification",
    ),
    Target(
        name="release",
        action=release,
        requires=(required("github_token"),),
        only_when=branch_is("release_branch"),
        parameters=("changelog_section", "github_repository"),
        description="Publish a GitHub release from the latest changelog section",
    ),
)


def build_graph() -> Result[TargetGraph, DuplicateTarget]:
    return TargetGraph.of(TARGETS)
