"""Plan and apply repository changes from a configuration document against stored state."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from pydantic import ValidationError

from covprov.errors import ConfigurationError
from covprov.models import Diagnostic, RepositoryState
from covprov.resources.base import ManagedResource

logger = logging.getLogger(__name__)

Action = Literal["create", "update", "delete", "noop"]

REQUIRED_FIELDS = ("service", "name", "comment_on_pull_requests", "send_build_status")
# service/name are the lookup key and never diffed
MUTABLE_FIELDS = ("comment_on_pull_requests", "send_build_status", "fail_threshold", "fail_change_threshold")
# accepted in a [repository.<label>] table; computed attributes (id, token, timestamps) are not
CONFIG_FIELDS = frozenset(
    REQUIRED_FIELDS
    + MUTABLE_FIELDS
    + ("commit_status_fail_threshold", "commit_status_fail_change_threshold")
)


@dataclass(frozen=True)
class Change:
    label: str
    action: Action
    plan: RepositoryState | None = None
    prior: RepositoryState | None = None

    def changed_fields(self) -> list[str]:
        if self.plan is None or self.prior is None:
            return []
        return [f for f in MUTABLE_FIELDS if getattr(self.plan, f) != getattr(self.prior, f)]


def desired_from_config(config: Mapping) -> dict[str, RepositoryState]:
    """Read ``[repository.<label>]`` tables into desired records."""
    tables = config.get("repository") or {}
    desired: dict[str, RepositoryState] = {}
    for label, table in tables.items():
        if not isinstance(table, Mapping):
            raise ConfigurationError(f"repository.{label} must be a table")
        unknown = sorted(k for k in table if k not in CONFIG_FIELDS)
        if unknown:
            raise ConfigurationError(f"repository.{label} has unknown attribute(s): {', '.join(unknown)}")
        missing = [f for f in REQUIRED_FIELDS if f not in table]
        if missing:
            raise ConfigurationError(f"repository.{label} is missing required attribute(s): {', '.join(missing)}")
        try:
            desired[label] = RepositoryState.model_validate(dict(table))
        except ValidationError as exc:
            raise ConfigurationError(f"repository.{label} is invalid: {exc}") from exc
    return desired


def refresh(
    resource: ManagedResource, prior: Mapping[str, RepositoryState]
) -> tuple[dict[str, RepositoryState], list[tuple[str, Diagnostic]]]:
    """Re-read every stored record. Records that no longer exist remotely are dropped."""
    refreshed: dict[str, RepositoryState] = {}
    diagnostics: list[tuple[str, Diagnostic]] = []
    for label, state in prior.items():
        response = resource.read(state)
        diagnostics.extend((label, d) for d in response.diagnostics)
        if response.state is not None:
            refreshed[label] = response.state
        elif response.has_error:
            # keep what we had; a failed read is not evidence of deletion
            refreshed[label] = state
    return refreshed, diagnostics


def plan_changes(desired: Mapping[str, RepositoryState], refreshed: Mapping[str, RepositoryState]) -> list[Change]:
    changes: list[Change] = []
    for label, plan in desired.items():
        prior = refreshed.get(label)
        if prior is None:
            changes.append(Change(label, "create", plan=plan))
            continue
        plan = plan.model_copy(update={"id": prior.id})
        change = Change(label, "update", plan=plan, prior=prior)
        if not change.changed_fields():
            change = Change(label, "noop", plan=plan, prior=prior)
        changes.append(change)
    for label, prior in refreshed.items():
        if label not in desired:
            changes.append(Change(label, "delete", prior=prior))
    return changes


def apply_changes(
    resource: ManagedResource, changes: list[Change], refreshed: Mapping[str, RepositoryState]
) -> tuple[dict[str, RepositoryState], list[tuple[str, Diagnostic]]]:
    """Run each change through the resource. A failed change leaves that label's prior state untouched."""
    new_state = dict(refreshed)
    diagnostics: list[tuple[str, Diagnostic]] = []
    for change in changes:
        if change.action == "noop":
            continue
        logger.debug("Applying %s to %s", change.action, change.label)
        if change.action == "create":
            response = resource.create(change.plan)
        elif change.action == "update":
            response = resource.update(change.plan)
        else:
            response = resource.delete(change.prior)
        diagnostics.extend((change.label, d) for d in response.diagnostics)
        if response.has_error:
            continue
        if response.state is None:
            new_state.pop(change.label, None)
        else:
            new_state[change.label] = response.state
    return new_state, diagnostics
