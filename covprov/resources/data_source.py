"""``coveralls_repository`` data source: read-only lookup by service and name."""

import logging

from covprov.client import CoverallsClient
from covprov.errors import CoverallsError
from covprov.models import ResourceResponse
from covprov.resources.repository import error_response
from covprov.translate import from_wire

logger = logging.getLogger(__name__)


class RepositoryDataSource:
    def __init__(self, client: CoverallsClient) -> None:
        self._client = client

    def read(self, service: str, name: str) -> ResourceResponse:
        try:
            state = from_wire(self._client.get(service, name))
        except CoverallsError as exc:
            logger.error("Lookup of %s:%s failed: %s", service, name, exc)
            return error_response(
                "Unable to read repository data",
                f"Could not read repository {service}:{name}",
                exc,
                f"{service}:{name}",
            )
        return ResourceResponse(state=state)
