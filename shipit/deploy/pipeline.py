"""Build, package, zip-deploy and notify.

State machine:

    BUILDING -> PACKAGING -> UPLOADING -> AWAITING_RESPONSE -> SUCCEEDED | FAILED

Any error before AWAITING_RESPONSE also ends in FAILED. The HTTP status
decides between the two terminal states; a non-2xx response is data
(``HttpResponse``), turned into ``UploadFailed`` here. Only SUCCEEDED sends
the notification, and a notification that cannot be delivered is
reported on the outcome without changing the state.

The upload waits for the endpoint without a deadline unless the HTTP
client was built with one; nothing is retried.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from shipit.core.pipeline_errors import (
    BuildFailed,
    NotificationFailed,
    PackagingError,
    StepError,
    UploadFailed,
)
from shipit.core.project import DeploySettings, Project
from shipit.core.result import Err, Ok, Result
from shipit.core.version import VersionDescriptor
from shipit.deploy.notify import DEFAULT_SENDER, Notification, send_notification
from shipit.deploy.package import copy_build_output, create_archive, stamp_version
from shipit.output.console import ConsoleProtocol, Style
from shipit.platform.process import CommandRunner, run_silent
from shipit.tools.http import HttpClient, HttpResponse

__all__ = [
    "DEFAULT_DEPLOY_HOST",
    "DeployOutcome",
    "DeployPipeline",
    "DeployRequest",
    "DeployState",
    "basic_auth_header",
]

DEFAULT_DEPLOY_HOST = "scm.azurewebsites.net"


class DeployState(Enum):
    BUILDING = "building"
    PACKAGING = "packaging"
    UPLOADING = "uploading"
    AWAITING_RESPONSE = "awaiting response"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DeployRequest:
    """Where to deploy and whom to tell."""

    app_service_name: str
    username: str
    password: str
    webhook_url: str
    deploy_host: str = DEFAULT_DEPLOY_HOST
    sender: str = DEFAULT_SENDER

    @property
    def url(self) -> str:
        return f"https://{self.app_service_name}.{self.deploy_host}/api/zipdeploy"


@dataclass(frozen=True, slots=True)
class DeployOutcome:
    response: HttpResponse
    archive: Path
    notification_error: NotificationFailed | None = None


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class DeployPipeline:
    """One deployment attempt. Create a new instance per run.

    ``state`` holds the current state and ``history`` every state entered.
    """

    def __init__(
        self,
        *,
        project: Project,
        settings: DeploySettings,
        http: HttpClient,
        console: ConsoleProtocol,
        runner: CommandRunner = run_silent,
    ) -> None:
        self._project = project
        self._settings = settings
        self._http = http
        self._console = console
        self._runner = runner
        self.history: list[DeployState] = []

    @property
    def state(self) -> DeployState | None:
        return self.history[-1] if self.history else None

    def _enter(self, state: DeployState) -> None:
        self.history.append(state)
        if state not in (DeployState.SUCCEEDED, DeployState.FAILED):
            self._console.print(f"deploy: {state.value}", Style.DIM)

    def _fail(self, error: StepError) -> Err[StepError]:
        self._enter(DeployState.FAILED)
        return Err(error)

    def run(self, request: DeployRequest, version: VersionDescriptor) -> Result[DeployOutcome, StepError]:
        self._enter(DeployState.BUILDING)
        built = self._build()
        if isinstance(built, Err):
            return self._fail(built.error)

        self._enter(DeployState.PACKAGING)
        packaged = self._package(version)
        if isinstance(packaged, Err):
            return self._fail(packaged.error)
        archive = packaged.value

        self._enter(DeployState.UPLOADING)
        headers = {
            "Authorization": basic_auth_header(request.username, request.password),
            "Content-Type": "application/zip",
        }
        self._console.print(f"POST {request.url}", Style.DIM)
        sent = self._http.post_file(request.url, archive, headers)
        if isinstance(sent, Err):
            return self._fail(UploadFailed(url=request.url, status=0, body=sent.error.message))

        self._enter(DeployState.AWAITING_RESPONSE)
        response = sent.value
        if response.body:
            self._console.print(response.body)
        self._console.print("Deployment finished")

        if not response.is_success:
            return self._fail(UploadFailed(url=request.url, status=response.status, body=response.body))

        self._enter(DeployState.SUCCEEDED)
        notified = send_notification(
            self._http,
            request.webhook_url,
            Notification.deployed(
                sender=request.sender,
                app=request.app_service_name,
                version=version.semver,
            ),
        )
        notification_error = notified.error if isinstance(notified, Err) else None
        return Ok(DeployOutcome(response=response, archive=archive, notification_error=notification_error))

    def _build(self) -> Result[None, BuildFailed]:
        for command in self._settings.build_commands:
            cmd = list(command)
            self._console.print(" ".join(cmd), Style.DIM)
            result = self._runner(cmd, self._project.root)
            if isinstance(result, Err):
                e = result.error
                return Err(BuildFailed(command=e.command, returncode=e.returncode, stderr=e.stderr))
        return Ok(None)

    def _package(self, version: VersionDescriptor) -> Result[Path, PackagingError]:
        site_dir = self._project.root / self._settings.site_dir

        if self._settings.build_output:
            output = self._settings.build_output
            copied = copy_build_output(self._project.root / output, site_dir / output)
            if isinstance(copied, Err):
                return copied

        if self._settings.manifest:
            stamped = stamp_version(
                site_dir / self._settings.manifest,
                self._settings.placeholder,
                version.semver,
            )
            if isinstance(stamped, Err):
                return stamped

        return create_archive(site_dir, self._project.output_dir / self._settings.archive_name)
