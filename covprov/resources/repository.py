"""``coveralls_repository`` resource: create/read/update against the Coveralls API.

Create and update responses never carry the repository token, so both are
followed by a GET before state is reported back.
"""

import logging

from covprov import identity
from covprov.client import CoverallsClient
from covprov.errors import CoverallsError, NotFoundError
from covprov.models import Diagnostic, RepositoryState, ResourceResponse
from covprov.resources.base import ManagedResource
from covprov.translate import from_wire, to_wire

logger = logging.getLogger(__name__)


def error_response(summary: str, detail: str, exc: CoverallsError, identifier: str | None) -> ResourceResponse:
    return ResourceResponse(
        diagnostics=[
            Diagnostic(
                severity="error",
                summary=summary,
                detail=f"{detail}, unexpected error: {exc}",
                condition=exc.condition,
                identifier=identifier,
            )
        ]
    )


class RepositoryResource(ManagedResource):
    def __init__(self, client: CoverallsClient, timeout: float | None = None) -> None:
        self._client = client
        # per-call bound on each request; None keeps the client's default
        self._timeout = timeout

    def _call(self, method, *args):
        if self._timeout is None:
            return method(*args)
        return method(*args, timeout=self._timeout)

    def create(self, plan: RepositoryState) -> ResourceResponse:
        try:
            identifier = identity.encode(plan.service or "", plan.name or "")
        except CoverallsError as exc:
            return error_response("Error creating repository", "Invalid service/name", exc, None)

        logger.info("Creating repository %s", identifier)
        try:
            self._call(self._client.create, to_wire(plan, include_key=True))
        except CoverallsError as exc:
            return error_response(
                "Error creating repository",
                f"Could not create repository {identifier}",
                exc,
                identifier,
            )

        # the token isn't returned on creation, so an additional read is necessary
        try:
            state = from_wire(self._call(self._client.get, plan.service, plan.name))
        except CoverallsError as exc:
            logger.error("Repository %s was created but could not be read back: %s", identifier, exc)
            return error_response(
                "Error reading repository",
                f"Repository {identifier} was created but could not be read; "
                f"import it with id {identifier!r} to track it",
                exc,
                identifier,
            )
        return ResourceResponse(state=state)

    def _observe(self, identifier: str) -> RepositoryState:
        service, name = identity.decode(identifier)
        return from_wire(self._call(self._client.get, service, name))

    def read(self, state: RepositoryState) -> ResourceResponse:
        identifier = state.id or ""
        try:
            observed = self._observe(identifier)
        except NotFoundError:
            logger.warning("Repository %s not found, removing from state", identifier)
            return ResourceResponse(
                diagnostics=[
                    Diagnostic(
                        severity="warning",
                        summary="Repository not found",
                        detail=f"Repository {identifier} no longer exists and will be removed from state",
                        condition=NotFoundError.condition,
                        identifier=identifier,
                    )
                ]
            )
        except CoverallsError as exc:
            return error_response(
                "Error reading repository",
                f"Could not read repository {identifier}",
                exc,
                identifier,
            )
        return ResourceResponse(state=observed)

    def update(self, plan: RepositoryState) -> ResourceResponse:
        identifier = plan.id or ""
        try:
            service, name = identity.decode(identifier)
        except CoverallsError as exc:
            return error_response("Error updating repository", "Invalid repository id", exc, identifier)

        logger.info("Updating repository %s", identifier)
        try:
            self._call(self._client.update, service, name, to_wire(plan, include_key=False))
        except CoverallsError as exc:
            return error_response(
                "Error updating repository",
                f"Could not update repository {identifier}",
                exc,
                identifier,
            )

        try:
            state = from_wire(self._call(self._client.get, service, name))
        except CoverallsError as exc:
            return error_response(
                "Error updating repository",
                f"Could not read repository {identifier}",
                exc,
                identifier,
            )
        return ResourceResponse(state=state)

    def delete(self, state: RepositoryState) -> ResourceResponse:
        # The Coveralls API has no delete endpoint; the remote repository is left in place.
        logger.warning("Delete not supported by Coveralls API, dropping %s from state only", state.id)
        return ResourceResponse(
            diagnostics=[
                Diagnostic(
                    severity="warning",
                    summary="Delete not supported by Coveralls API",
                    detail=f"Repository {state.id} was removed from state but still exists on Coveralls",
                    identifier=state.id,
                )
            ]
        )

    def import_state(self, identifier: str) -> ResourceResponse:
        try:
            identity.decode(identifier)
        except CoverallsError as exc:
            return error_response("Error importing repository", "Invalid import id", exc, identifier)

        logger.info("Importing repository %s", identifier)
        try:
            observed = self._observe(identifier)
        except NotFoundError as exc:
            return error_response(
                "Error importing repository",
                f"Cannot import non-existent repository {identifier}",
                exc,
                identifier,
            )
        except CoverallsError as exc:
            return error_response(
                "Error importing repository",
                f"Could not read repository {identifier}",
                exc,
                identifier,
            )
        return ResourceResponse(state=observed)
