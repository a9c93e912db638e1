"""Shared test fixtures."""

import pytest

from covprov.client import CoverallsClient
from covprov.models import RepositoryState
from covprov.resources.repository import RepositoryResource


@pytest.fixture
def client():
    with CoverallsClient("test-token") as c:
        yield c


@pytest.fixture
def resource(client: CoverallsClient) -> RepositoryResource:
    return RepositoryResource(client)


@pytest.fixture
def remote_repo() -> dict:
    """GET /api/repos/github/org/app body, token included."""
    return {
        "service": "github",
        "name": "org/app",
        "token": "abc123",
        "comment_on_pull_requests": True,
        "send_build_status": True,
        "commit_status_fail_threshold": None,
        "commit_status_fail_change_threshold": None,
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-02T11:30:00Z",
    }


@pytest.fixture
def tracked_state() -> RepositoryState:
    return RepositoryState(
        id="github:org/app",
        service="github",
        name="org/app",
        token="abc123",
        comment_on_pull_requests=True,
        send_build_status=True,
    )
