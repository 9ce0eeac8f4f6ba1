"""Tests for shipit.core.project module."""

from __future__ import annotations

from pathlib import Path

from shipit.core.project import (
    DEFAULT_SECRETS_FILE,
    DeploySettings,
    Project,
    ProjectFile,
    find_project_root,
    load_project_file,
)
from shipit.core.result import Err, Ok


class TestLoadProjectFile:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        result = load_project_file(tmp_path / "shipit.toml")
        assert result == Ok(ProjectFile())

    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "shipit.toml"
        path.write_text(
            """
[params]
app_service_name = "antlr-calculator-demo"
upload_timeout = 600

[secrets]
file = "vault.toml"
web_deploy_username = "Demo-WebDeployUsername"

[deploy]
build_commands = ["npm ci", "npm run build:demo"]
site_dir = "site"
manifest = "app.html"
""",
            encoding="utf-8",
        )
        result = load_project_file(path)
        assert isinstance(result, Ok)
        pf = result.value
        assert pf.params == {"app_service_name": "antlr-calculator-demo", "upload_timeout": "600"}
        assert pf.secrets_file == "vault.toml"
        assert pf.secret_aliases == {"web_deploy_username": "Demo-WebDeployUsername"}
        assert pf.deploy.build_commands == (("npm", "ci"), ("npm", "run", "build:demo"))
        assert pf.deploy.site_dir == "site"
        assert pf.deploy.manifest == "app.html"
        assert pf.deploy.build_output == "dist"

    def test_secrets_table_without_file(self, tmp_path: Path) -> None:
        path = tmp_path / "shipit.toml"
        path.write_text('[secrets]\ngithub_token = "GitHub-Token"\n', encoding="utf-8")
        result = load_project_file(path)
        assert isinstance(result, Ok)
        assert result.value.secrets_file == DEFAULT_SECRETS_FILE

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "shipit.toml"
        path.write_text("[params\n", encoding="utf-8")
        result = load_project_file(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message


class TestDeploySettings:
    def test_defaults(self) -> None:
        settings = DeploySettings()
        assert settings.build_commands == (("npm", "ci"), ("npm", "run", "build"))
        assert settings.site_dir == "demo"
        assert settings.manifest == "index.html"
        assert settings.placeholder == "@@APP_VERSION@@"
        assert settings.archive_name == "deployment.zip"


class TestProject:
    def test_paths(self, tmp_path: Path) -> None:
        project = Project(root=tmp_path)
        assert project.config_path == tmp_path / "shipit.toml"
        assert project.output_dir == tmp_path / "output"
        assert project.dist_dir == tmp_path / "dist"
        assert project.changelog_path == tmp_path / "CHANGELOG.md"

    def test_find_root_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "shipit.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "src" / "lib"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_find_root_falls_back_to_start(self, tmp_path: Path) -> None:
        nested = tmp_path / "a"
        nested.mkdir()
        assert find_project_root(nested) == nested.resolve()
