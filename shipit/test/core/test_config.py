"""Tests for shipit.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipit.core.config import (
    ConfigSnapshot,
    DefaultSource,
    EnvironmentSource,
    FileSource,
    FlagSource,
    Secret,
    SecretFileSource,
    env_name,
    parse_param_flags,
    resolve,
)
from shipit.core.result import Err, Ok


class TestSecret:
    def test_str_and_repr_are_masked(self) -> None:
        secret = Secret("hunter2")
        assert "hunter2" not in str(secret)
        assert "hunter2" not in repr(secret)

    def test_reveal(self) -> None:
        assert Secret("hunter2").reveal() == "hunter2"


class TestEnvName:
    def test_upper_case(self) -> None:
        assert env_name("web_deploy_username") == "WEB_DEPLOY_USERNAME"

    def test_dashes(self) -> None:
        assert env_name("app-service-name") == "APP_SERVICE_NAME"


class TestResolve:
    """Precedence: flag > environment > shipit.toml > secret store > default."""

    def _sources(
        self,
        *,
        flags: dict[str, str] | None = None,
        environ: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        secrets: dict[str, str] | None = None,
        defaults: dict[str, str] | None = None,
    ) -> list:
        return [
            FlagSource(flags or {}),
            EnvironmentSource(environ or {}),
            FileSource(params or {}),
            SecretFileSource(secrets or {}),
            DefaultSource(defaults or {}),
        ]

    def test_flag_wins_over_environment(self) -> None:
        sources = self._sources(
            flags={"app_service_name": "from-flag"},
            environ={"APP_SERVICE_NAME": "from-env"},
        )
        snapshot = resolve(sources, ["app_service_name"])
        assert snapshot.get("app_service_name") == "from-flag"
        assert snapshot.source_of("app_service_name") == "flag"

    def test_environment_wins_over_file(self) -> None:
        sources = self._sources(
            environ={"RELEASE_BRANCH": "main"},
            params={"release_branch": "master"},
        )
        snapshot = resolve(sources, ["release_branch"])
        assert snapshot.get("release_branch") == "main"
        assert snapshot.source_of("release_branch") == "environment"

    def test_file_wins_over_secret_store(self) -> None:
        sources = self._sources(
            params={"github_token": "plain"},
            secrets={"github_token": "vaulted"},
        )
        assert resolve(sources, ["github_token"]).get("github_token") == "plain"

    def test_default_is_last(self) -> None:
        sources = self._sources(defaults={"release_branch": "master"})
        snapshot = resolve(sources, ["release_branch"])
        assert snapshot.get("release_branch") == "master"
        assert snapshot.source_of("release_branch") == "default"

    def test_empty_value_falls_through(self) -> None:
        """An empty flag does not hide a value further down."""
        sources = self._sources(flags={"app_service_name": "  "}, params={"app_service_name": "demo"})
        assert resolve(sources, ["app_service_name"]).get("app_service_name") == "demo"

    def test_values_are_stripped(self) -> None:
        sources = self._sources(environ={"APP_SERVICE_NAME": "  demo \n"})
        assert resolve(sources, ["app_service_name"]).get("app_service_name") == "demo"

    def test_unresolved_key_is_absent(self) -> None:
        snapshot = resolve(self._sources(), ["github_token"])
        assert "github_token" not in snapshot
        assert snapshot.get("github_token") is None
        assert snapshot.get("github_token", "fallback") == "fallback"

    def test_only_requested_keys_reach_secret_store(self) -> None:
        store = SecretFileSource({"github_token": "t", "other": "o"})
        resolve([FlagSource({}), store], ["github_token"])
        assert store.lookups == ["github_token"]

    def test_secret_store_aliases(self) -> None:
        store = SecretFileSource(
            {"Demo-WebDeployUsername": "deployer"},
            {"web_deploy_username": "Demo-WebDeployUsername"},
        )
        snapshot = resolve([store], ["web_deploy_username"])
        assert snapshot.get("web_deploy_username") == "deployer"
        assert store.lookups == ["Demo-WebDeployUsername"]


class TestConfigSnapshot:
    def test_expect_returns_value(self) -> None:
        snapshot = ConfigSnapshot.of({"app_service_name": "demo"})
        assert snapshot.expect("app_service_name") == "demo"

    def test_expect_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            ConfigSnapshot.of({}).expect("app_service_name")

    def test_redacted_masks_secrets(self) -> None:
        snapshot = resolve(
            [FlagSource({"app_service_name": "demo"}), SecretFileSource({"github_token": "ghp_x"})],
            ["app_service_name", "github_token"],
        )
        redacted = snapshot.redacted()
        assert redacted["app_service_name"] == "demo"
        assert "ghp_x" not in redacted["github_token"]
        assert snapshot.get("github_token") == "ghp_x"

    def test_values_are_read_only(self) -> None:
        snapshot = ConfigSnapshot.of({"a": "1"})
        with pytest.raises(TypeError):
            snapshot.values["a"] = snapshot.values["a"]  # type: ignore[index]


class TestSecretFileSourceLoad:
    def test_missing_file_is_empty_store(self, tmp_path: Path) -> None:
        result = SecretFileSource.load(tmp_path / "secrets.toml")
        assert isinstance(result, Ok)
        assert result.value.lookup("github_token") is None

    def test_secrets_table(self, tmp_path: Path) -> None:
        path = tmp_path / "secrets.toml"
        path.write_text('[secrets]\ngithub_token = "ghp_abc"\n', encoding="utf-8")
        result = SecretFileSource.load(path)
        assert isinstance(result, Ok)
        value = result.value.lookup("github_token")
        assert isinstance(value, Secret)
        assert value.reveal() == "ghp_abc"

    def test_root_table(self, tmp_path: Path) -> None:
        path = tmp_path / "secrets.toml"
        path.write_text('github_token = "ghp_abc"\n', encoding="utf-8")
        result = SecretFileSource.load(path)
        assert isinstance(result, Ok)
        assert result.value.lookup("github_token") is not None

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "secrets.toml"
        path.write_text("github_token = ", encoding="utf-8")
        result = SecretFileSource.load(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message
        assert result.error.path == path


class TestParseParamFlags:
    def test_key_value(self) -> None:
        assert parse_param_flags(["app_service_name=demo"]) == Ok({"app_service_name": "demo"})

    def test_dashes_normalized(self) -> None:
        assert parse_param_flags(["app-service-name=demo"]) == Ok({"app_service_name": "demo"})

    def test_value_may_contain_equals(self) -> None:
        assert parse_param_flags(["token=a=b"]) == Ok({"token": "a=b"})

    def test_missing_equals(self) -> None:
        result = parse_param_flags(["app_service_name"])
        assert isinstance(result, Err)
        assert "expected key=value" in result.error.message

    def test_empty_key(self) -> None:
        assert isinstance(parse_param_flags(["=demo"]), Err)
