"""Tests for RepositoryResource lifecycle verbs."""

import json
import logging

import httpx
import pytest
from pytest_httpx import HTTPXMock

from covprov.client import DEFAULT_ENDPOINT, CoverallsClient
from covprov.models import RepositoryState
from covprov.resources.repository import RepositoryResource

REPOS_URL = f"{DEFAULT_ENDPOINT}/api/repos"
ITEM_URL = f"{REPOS_URL}/github/org/app"


def _created(remote_repo: dict) -> dict:
    repo = dict(remote_repo)
    del repo["token"]
    return {"repo": repo}


class TestCreate:
    def test_create_then_read_back_token(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        httpx_mock.add_response(method="POST", url=REPOS_URL, status_code=201, json=_created(remote_repo))
        httpx_mock.add_response(method="GET", url=ITEM_URL, json=remote_repo)

        plan = RepositoryState(
            service="github", name="org/app", comment_on_pull_requests=True, send_build_status=True
        )
        response = resource.create(plan)

        assert not response.diagnostics
        assert response.state is not None
        assert response.state.id == "github:org/app"
        assert response.state.token == "abc123"
        assert response.state.created_at == "2024-05-01T10:00:00Z"

        post, get = httpx_mock.get_requests()
        assert post.method == "POST"
        assert get.method == "GET"
        assert json.loads(post.content) == {
            "repo": {
                "service": "github",
                "name": "org/app",
                "comment_on_pull_requests": True,
                "send_build_status": True,
                "commit_status_fail_threshold": None,
                "commit_status_fail_change_threshold": None,
            }
        }

    def test_missing_name_fails_before_network(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        response = resource.create(RepositoryState(service="github", comment_on_pull_requests=True))
        assert response.has_error
        assert response.state is None
        assert response.diagnostics[0].condition == "malformed_identifier"
        assert not httpx_mock.get_requests()

    def test_create_rejected(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="POST", url=REPOS_URL, status_code=422, text="Name has already been taken")

        response = resource.create(RepositoryState(service="github", name="org/app"))

        assert response.state is None
        diag = response.diagnostics[0]
        assert diag.severity == "error"
        assert diag.summary == "Error creating repository"
        assert diag.condition == "remote"
        assert "Name has already been taken" in diag.detail
        assert len(httpx_mock.get_requests()) == 1

    def test_failed_read_back_keeps_identifier(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        httpx_mock.add_response(method="POST", url=REPOS_URL, status_code=201, json=_created(remote_repo))
        httpx_mock.add_exception(httpx.ConnectError("connection reset"), method="GET", url=ITEM_URL)

        response = resource.create(RepositoryState(service="github", name="org/app"))

        assert response.state is None
        diag = response.diagnostics[0]
        assert diag.severity == "error"
        assert diag.condition == "transport"
        assert diag.identifier == "github:org/app"
        assert "github:org/app" in diag.detail


class TestRead:
    def test_refreshes_state(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        httpx_mock.add_response(
            method="GET", url=ITEM_URL, json={**remote_repo, "commit_status_fail_threshold": 90.0}
        )
        response = resource.read(RepositoryState(id="github:org/app"))
        assert response.state is not None
        assert response.state.fail_threshold == 90.0
        assert response.state.fail_change_threshold is None
        assert response.state.name == "org/app"

    def test_not_found_reports_absence(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", url=ITEM_URL, status_code=404)

        response = resource.read(RepositoryState(id="github:org/app"))

        assert response.state is None
        assert not response.has_error
        diag = response.diagnostics[0]
        assert diag.condition == "not_found"
        assert "not found" in diag.summary.lower()
        assert "removed from state" in diag.detail

    def test_server_error_escalated(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", url=ITEM_URL, status_code=500, text="internal error")
        response = resource.read(RepositoryState(id="github:org/app"))
        assert response.has_error
        assert response.diagnostics[0].condition == "remote"

    def test_malformed_id(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        response = resource.read(RepositoryState(id="no-separator-here"))
        assert response.has_error
        assert response.diagnostics[0].condition == "malformed_identifier"
        assert not httpx_mock.get_requests()


class TestUpdate:
    def test_puts_mutable_fields_then_reads(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        updated = {**remote_repo, "commit_status_fail_threshold": 80.0}
        httpx_mock.add_response(method="PUT", url=ITEM_URL, json=_created(updated))
        httpx_mock.add_response(method="GET", url=ITEM_URL, json=updated)

        plan = RepositoryState(
            id="github:org/app",
            service="github",
            name="org/app",
            comment_on_pull_requests=True,
            send_build_status=True,
            fail_threshold=80.0,
        )
        response = resource.update(plan)

        assert response.state is not None
        assert response.state.fail_threshold == 80.0
        assert response.state.fail_change_threshold is None
        assert response.state.token == "abc123"

        put, get = httpx_mock.get_requests()
        assert put.method == "PUT"
        assert get.method == "GET"
        body = json.loads(put.content)["repo"]
        assert body["commit_status_fail_threshold"] == 80.0
        assert body["commit_status_fail_change_threshold"] is None
        assert "service" not in body
        assert "name" not in body

    def test_update_failure_skips_read(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="PUT", url=ITEM_URL, status_code=403, text="forbidden")
        response = resource.update(RepositoryState(id="github:org/app"))
        assert response.has_error
        assert response.state is None
        assert response.diagnostics[0].summary == "Error updating repository"
        assert len(httpx_mock.get_requests()) == 1

    def test_read_back_not_found_is_error(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        httpx_mock.add_response(method="PUT", url=ITEM_URL, json=_created(remote_repo))
        httpx_mock.add_response(method="GET", url=ITEM_URL, status_code=404)
        response = resource.update(RepositoryState(id="github:org/app"))
        assert response.has_error
        assert response.diagnostics[0].condition == "not_found"


class TestDelete:
    def test_no_network_call(self, tracked_state: RepositoryState) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500)

        client = CoverallsClient("tok", transport=httpx.MockTransport(handler))
        response = RepositoryResource(client).delete(tracked_state)

        assert calls == []
        assert response.state is None
        assert not response.has_error
        assert response.diagnostics[0].severity == "warning"
        assert "Delete not supported" in response.diagnostics[0].summary


class TestImport:
    def test_populates_from_read(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, remote_repo: dict
    ) -> None:
        httpx_mock.add_response(method="GET", url=ITEM_URL, json=remote_repo)
        response = resource.import_state("github:org/app")
        assert response.state is not None
        assert response.state.id == "github:org/app"
        assert response.state.token == "abc123"

    def test_invalid_id(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        response = resource.import_state("org/app")
        assert response.has_error
        assert response.diagnostics[0].summary == "Error importing repository"
        assert not httpx_mock.get_requests()

    def test_missing_repository_is_error(self, resource: RepositoryResource, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(method="GET", url=ITEM_URL, status_code=404)
        response = resource.import_state("github:org/app")
        assert response.has_error
        assert response.diagnostics[0].condition == "not_found"

    def test_missing_repository_does_not_mention_state(
        self, resource: RepositoryResource, httpx_mock: HTTPXMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        httpx_mock.add_response(method="GET", url=ITEM_URL, status_code=404)
        with caplog.at_level(logging.DEBUG, logger="covprov"):
            response = resource.import_state("github:org/app")
        assert "Cannot import non-existent repository" in response.diagnostics[0].detail
        assert "removing from state" not in caplog.text
        assert "removed from state" not in response.diagnostics[0].detail


def test_per_call_timeout_is_forwarded(remote_repo: dict) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=remote_repo)

    client = CoverallsClient("tok", transport=httpx.MockTransport(handler))
    RepositoryResource(client, timeout=2.5).read(RepositoryState(id="github:org/app"))

    assert seen[0].extensions["timeout"]["read"] == 2.5
