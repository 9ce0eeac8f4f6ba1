from __future__ import annotations

from pathlib import Path

import pytest
import typer

from shipit.cli.context import CLIContext, build_context, run_version, upload_timeout, value_sources
from shipit.core.errors import ErrorCode
from shipit.core.project import Project, ProjectFile
from shipit.core.result import Ok
from shipit.output.console import MockConsole


def _ctx(tmp_path: Path, flags: dict[str, str] | None = None, params: dict[str, str] | None = None) -> CLIContext:
    return CLIContext(
        project=Project(root=tmp_path),
        settings=ProjectFile(params=params or {}),
        flags=flags or {},
        console=MockConsole(),
    )


class TestValueSources:
    def test_precedence_order(self, tmp_path: Path) -> None:
        sources = value_sources(_ctx(tmp_path), environ={}).unwrap()
        assert [s.name for s in sources] == [
            "flag",
            "environment",
            "shipit.toml",
            "secret store",
            "default",
        ]

    def test_secret_file_is_read(self, tmp_path: Path) -> None:
        secrets = tmp_path / ".shipit" / "secrets.toml"
        secrets.parent.mkdir()
        secrets.write_text('[secrets]\ngithub_token = "ghp_x"\n', encoding="utf-8")

        sources = value_sources(_ctx(tmp_path), environ={}).unwrap()

        value = sources[3].lookup("github_token")
        assert value is not None
        assert str(value) != "ghp_x"

    def test_broken_secret_file(self, tmp_path: Path) -> None:
        secrets = tmp_path / ".shipit" / "secrets.toml"
        secrets.parent.mkdir()
        secrets.write_text("github_token =", encoding="utf-8")
        assert value_sources(_ctx(tmp_path), environ={}).is_err()


class TestRunVersion:
    def test_overrides_skip_git(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, flags={"version": "2.0.0", "branch": "master", "commit": "abc"})
        result = run_version(ctx, environ={})
        assert isinstance(result, Ok)
        assert result.value.semver == "2.0.0"
        assert result.value.tag == "v2.0.0"

    def test_environment_override(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, flags={"branch": "master", "commit": "abc"})
        result = run_version(ctx, environ={"VERSION": "3.0.1"})
        assert result.unwrap().semver == "3.0.1"


class TestUploadTimeout:
    def test_default_is_unbounded(self, tmp_path: Path) -> None:
        assert upload_timeout(_ctx(tmp_path), environ={}) is None

    def test_from_project_file(self, tmp_path: Path) -> None:
        assert upload_timeout(_ctx(tmp_path, params={"upload_timeout": "600"}), environ={}) == 600.0

    def test_not_a_number(self, tmp_path: Path) -> None:
        with pytest.raises(typer.Exit) as exc:
            upload_timeout(_ctx(tmp_path, flags={"upload_timeout": "soon"}), environ={})
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


class TestBuildContext:
    def test_loads_project_file(self, tmp_path: Path) -> None:
        (tmp_path / "shipit.toml").write_text('[params]\napp_service_name = "calc-demo"\n', encoding="utf-8")
        ctx = build_context(root=tmp_path, params=["release-branch=main"])
        assert ctx.project.root == tmp_path.resolve()
        assert ctx.settings.params == {"app_service_name": "calc-demo"}
        assert ctx.flags == {"release_branch": "main"}

    def test_bad_param(self, tmp_path: Path) -> None:
        with pytest.raises(typer.Exit) as exc:
            build_context(root=tmp_path, params=["oops"])
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)

    def test_bad_project_file(self, tmp_path: Path) -> None:
        (tmp_path / "shipit.toml").write_text("[params\n", encoding="utf-8")
        with pytest.raises(typer.Exit) as exc:
            build_context(root=tmp_path, params=[])
        assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
