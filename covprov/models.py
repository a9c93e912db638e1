"""Shared pydantic models — the contract between the client, the resources and main.py."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Keys the API treats as "unset" when missing; thresholds are always sent so null clears them.
_OMIT_WHEN_EMPTY = frozenset({"service", "name", "token", "created_at", "updated_at"})


class Repository(BaseModel):
    """Repository as the Coveralls API represents it on the wire."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    service: str | None = None  # "github", "gitlab", ...
    name: str | None = None  # owner/repo
    token: str | None = None  # only returned by GET
    comment_on_pull_requests: bool = False
    send_build_status: bool = False
    fail_threshold: float | None = Field(default=None, alias="commit_status_fail_threshold")
    fail_change_threshold: float | None = Field(default=None, alias="commit_status_fail_change_threshold")
    created_at: str | None = None
    updated_at: str | None = None

    def to_payload(self) -> dict:
        data = self.model_dump(by_alias=True)
        return {k: v for k, v in data.items() if not (k in _OMIT_WHEN_EMPTY and not v)}


class RepositoryEnvelope(BaseModel):
    """Body of POST/PUT requests and responses: ``{"repo": {...}}``."""

    repo: Repository


class RepositoryState(BaseModel):
    """Orchestrator-facing record: desired input on create/update, observed output everywhere."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None  # service:name
    service: str | None = None
    name: str | None = None
    token: str | None = None
    comment_on_pull_requests: bool | None = None
    send_build_status: bool | None = None
    fail_threshold: float | None = Field(default=None, alias="commit_status_fail_threshold")
    fail_change_threshold: float | None = Field(default=None, alias="commit_status_fail_change_threshold")
    created_at: str | None = None
    updated_at: str | None = None


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Literal["error", "warning"]
    summary: str
    detail: str = ""
    condition: str | None = None  # CoverallsError.condition of the cause, if any
    identifier: str | None = None


class ResourceResponse(BaseModel):
    """Returned by every resource verb: a record, diagnostics, or both (warnings only)."""

    model_config = ConfigDict(frozen=True)

    state: RepositoryState | None = None
    diagnostics: list[Diagnostic] = []

    @property
    def has_error(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)
