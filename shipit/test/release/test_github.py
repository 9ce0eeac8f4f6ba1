"""Tests for shipit.release.github module."""

from __future__ import annotations

import pytest

from shipit.core.pipeline_errors import ReleasePublishError
from shipit.core.result import Err, Ok
from shipit.release.github import RepositoryCoordinates, publish_release, repository_coordinates
from shipit.tools.http import HttpError, HttpResponse, MockHttpClient

REPO = RepositoryCoordinates(owner="bkiers", name="antlr-calculator")
RELEASES_URL = "https://api.github.com/repos/bkiers/antlr-calculator/releases"


class TestRepositoryCoordinates:
    @pytest.mark.parametrize(
        "remote",
        [
            "https://github.com/bkiers/antlr-calculator.git",
            "https://github.com/bkiers/antlr-calculator",
            "https://token@github.com/bkiers/antlr-calculator.git",
            "git@github.com:bkiers/antlr-calculator.git",
            "ssh://git@github.com/bkiers/antlr-calculator.git",
        ],
    )
    def test_remote_forms(self, remote: str) -> None:
        assert repository_coordinates(remote) == Ok(REPO)

    def test_not_github(self) -> None:
        assert isinstance(repository_coordinates("https://gitlab.com/a/b.git"), Err)

    def test_slug(self) -> None:
        assert REPO.slug == "bkiers/antlr-calculator"


class TestPublishRelease:
    def test_created(self) -> None:
        http = MockHttpClient()
        http.set_response(
            RELEASES_URL,
            HttpResponse(201, '{"html_url": "https://github.com/bkiers/antlr-calculator/releases/v1.2.0"}'),
        )

        result = publish_release(
            http,
            tag="v1.2.0",
            commit="abc1234",
            notes="## v1.2.0\n- fix A",
            repository=REPO,
            token="ghp_x",
        )

        assert result == Ok("https://github.com/bkiers/antlr-calculator/releases/v1.2.0")
        call = http.calls[0]
        assert call.headers["Authorization"] == "Bearer ghp_x"
        assert call.json() == {
            "tag_name": "v1.2.0",
            "target_commitish": "abc1234",
            "name": "v1.2.0",
            "body": "## v1.2.0\n- fix A",
        }

    def test_body_without_html_url(self) -> None:
        http = MockHttpClient()
        http.set_response(RELEASES_URL, HttpResponse(201, "not json"))
        result = publish_release(http, tag="v1.0.0", commit="c", notes="", repository=REPO, token="t")
        assert result == Ok(RELEASES_URL)

    def test_rejected(self) -> None:
        http = MockHttpClient()
        http.set_response(RELEASES_URL, HttpResponse(422, "already_exists"))
        result = publish_release(http, tag="v1.0.0", commit="c", notes="", repository=REPO, token="t")
        assert result == Err(ReleasePublishError(tag="v1.0.0", status=422, message="already_exists"))

    def test_unreachable(self) -> None:
        http = MockHttpClient()
        http.set_response(RELEASES_URL, HttpError(url=RELEASES_URL, message="timed out"))
        result = publish_release(http, tag="v1.0.0", commit="c", notes="", repository=REPO, token="t")
        assert result == Err(ReleasePublishError(tag="v1.0.0", status=0, message="timed out"))
