"""Mapping between the wire ``Repository`` and the orchestrator-facing ``RepositoryState``."""

from covprov import identity
from covprov.models import Repository, RepositoryState


def to_wire(state: RepositoryState, *, include_key: bool) -> Repository:
    """Build a request body from a desired record.

    ``service``/``name`` are only sent on create; update addresses them via the URL.
    """
    fields: dict = {
        "comment_on_pull_requests": bool(state.comment_on_pull_requests),
        "send_build_status": bool(state.send_build_status),
        "fail_threshold": state.fail_threshold,
        "fail_change_threshold": state.fail_change_threshold,
    }
    if include_key:
        fields["service"] = state.service
        fields["name"] = state.name
    return Repository(**fields)


def from_wire(repository: Repository) -> RepositoryState:
    return RepositoryState(
        id=identity.encode(repository.service or "", repository.name or ""),
        service=repository.service,
        name=repository.name,
        token=repository.token,
        comment_on_pull_requests=repository.comment_on_pull_requests,
        send_build_status=repository.send_build_status,
        fail_threshold=repository.fail_threshold,
        fail_change_threshold=repository.fail_change_threshold,
        created_at=repository.created_at,
        updated_at=repository.updated_at,
    )
