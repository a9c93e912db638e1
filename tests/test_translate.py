"""Tests for covprov.translate."""

from covprov.models import Repository, RepositoryState
from covprov.translate import from_wire, to_wire


def _plan(**kwargs) -> RepositoryState:
    defaults = {
        "id": "github:org/app",
        "service": "github",
        "name": "org/app",
        "comment_on_pull_requests": True,
        "send_build_status": False,
        "fail_threshold": 75.0,
    }
    defaults.update(kwargs)
    return RepositoryState(**defaults)


class TestToWire:
    def test_create_payload_carries_key(self) -> None:
        payload = to_wire(_plan(), include_key=True).to_payload()
        assert payload["service"] == "github"
        assert payload["name"] == "org/app"

    def test_update_payload_never_carries_key(self) -> None:
        payload = to_wire(_plan(), include_key=False).to_payload()
        assert "service" not in payload
        assert "name" not in payload

    def test_copies_settings_only(self) -> None:
        repo = to_wire(_plan(token="secret", created_at="yesterday"), include_key=True)
        assert repo.comment_on_pull_requests is True
        assert repo.send_build_status is False
        assert repo.fail_threshold == 75.0
        assert repo.fail_change_threshold is None
        assert repo.token is None
        assert repo.created_at is None


class TestFromWire:
    def test_computes_id(self) -> None:
        state = from_wire(Repository(service="github", name="org/app", token="abc123"))
        assert state.id == "github:org/app"
        assert state.token == "abc123"

    def test_absent_threshold_stays_unset(self) -> None:
        state = from_wire(Repository.model_validate({"service": "github", "name": "org/app"}))
        assert state.fail_threshold is None
        assert state.fail_change_threshold is None

    def test_zero_threshold_is_kept(self) -> None:
        state = from_wire(
            Repository.model_validate(
                {"service": "github", "name": "org/app", "commit_status_fail_threshold": 0.0}
            )
        )
        assert state.fail_threshold == 0.0
        assert state.fail_change_threshold is None

    def test_timestamps_copied(self, remote_repo: dict) -> None:
        state = from_wire(Repository.model_validate(remote_repo))
        assert state.created_at == "2024-05-01T10:00:00Z"
        assert state.updated_at == "2024-05-02T11:30:00Z"
