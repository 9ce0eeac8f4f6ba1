"""Project layout and the ``shipit.toml`` file.

The project root is the directory holding ``shipit.toml`` (or the
directory given with ``--root``). All target paths are relative to it.

Example ``shipit.toml``:

    [params]
    app_service_name = "antlr-calculator-demo"
    release_branch = "master"

    [secrets]
    file = ".shipit/secrets.toml"
    web_deploy_username = "AntlrCalculatorDemo-WebDeployUsername"
    web_deploy_password = "AntlrCalculatorDemo-WebDeployPassword"

    [deploy]
    build_commands = ["npm ci", "npm run build"]
    site_dir = "demo"
    manifest = "index.html"
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path

from .config import ConfigError
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table, scalar_table

__all__ = [
    "DeploySettings",
    "Project",
    "ProjectFile",
    "PROJECT_FILE_NAME",
    "find_project_root",
    "load_project_file",
]

PROJECT_FILE_NAME = "shipit.toml"
DEFAULT_SECRETS_FILE = ".shipit/secrets.toml"
VERSION_PLACEHOLDER = "@@APP_VERSION@@"


def _default_build_commands() -> tuple[tuple[str, ...], ...]:
    return (("npm", "ci"), ("npm", "run", "build"))


@dataclass(frozen=True, slots=True)
class DeploySettings:
    """How the deploy target builds and packages the site."""

    build_commands: tuple[tuple[str, ...], ...] = field(default_factory=_default_build_commands)
    build_output: str = "dist"
    site_dir: str = "demo"
    manifest: str = "index.html"
    placeholder: str = VERSION_PLACEHOLDER
    archive_name: str = "deployment.zip"


@dataclass(frozen=True, slots=True)
class ProjectFile:
    """Parsed ``shipit.toml``; every table is optional."""

    params: dict[str, str] = field(default_factory=dict)
    secret_aliases: dict[str, str] = field(default_factory=dict)
    secrets_file: str = DEFAULT_SECRETS_FILE
    deploy: DeploySettings = field(default_factory=DeploySettings)

    @classmethod
    def from_dict(cls, data: StrDict) -> ProjectFile:
        params = scalar_table(get_table(data, "params") or {})

        secrets = dict(get_table(data, "secrets") or {})
        secrets_file = get_str(secrets, "file") or DEFAULT_SECRETS_FILE
        secrets.pop("file", None)
        aliases = {k: v for k, v in scalar_table(secrets).items() if v.strip()}

        deploy: StrDict = get_table(data, "deploy") or {}
        defaults = DeploySettings()
        commands = get_str_list(deploy, "build_commands")
        return cls(
            params=params,
            secret_aliases=aliases,
            secrets_file=secrets_file,
            deploy=DeploySettings(
                build_commands=(
                    tuple(tuple(shlex.split(c)) for c in commands if c.strip())
                    if commands is not None
                    else defaults.build_commands
                ),
                build_output=get_str(deploy, "build_output") or defaults.build_output,
                site_dir=get_str(deploy, "site_dir") or defaults.site_dir,
                manifest=get_str(deploy, "manifest") or defaults.manifest,
                placeholder=get_str(deploy, "placeholder") or defaults.placeholder,
                archive_name=get_str(deploy, "archive_name") or defaults.archive_name,
            ),
        )


def load_project_file(path: Path) -> Result[ProjectFile, ConfigError]:
    """Load ``shipit.toml``; a missing file yields the defaults."""
    import tomllib

    if not path.exists():
        return Ok(ProjectFile())

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(ProjectFile.from_dict(data))


@dataclass(frozen=True, slots=True)
class Project:
    """Paths every target works with."""

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / PROJECT_FILE_NAME

    @property
    def output_dir(self) -> Path:
        return self.root / "output"

    @property
    def dist_dir(self) -> Path:
        return self.root / "dist"

    @property
    def changelog_path(self) -> Path:
        return self.root / "CHANGELOG.md"


def find_project_root(start: Path) -> Path:
    """Walk upward from ``start`` to the nearest ``shipit.toml``.

    Falls back to ``start`` itself; a project file is optional.
    """
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / PROJECT_FILE_NAME).is_file():
            return candidate
    return start
