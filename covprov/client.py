"""Coveralls REST API client for repository settings."""

import logging

import httpx
from pydantic import ValidationError

from covprov.errors import ConfigurationError, NotFoundError, RemoteError, TransportError
from covprov.models import Repository, RepositoryEnvelope

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://coveralls.io"
CONTENT_TYPE = "application/json; charset=utf-8"

# httpx sentinel meaning "use the client's default timeout"
_DEFAULT = httpx.USE_CLIENT_DEFAULT


class CoverallsClient:
    """Authenticated client bound to one endpoint and one API token.

    Holds no per-call state, so a single instance can be shared across threads.
    """

    def __init__(
        self,
        token: str,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise ConfigurationError("Coveralls API token is empty")
        if not endpoint:
            raise ConfigurationError("Coveralls endpoint is empty")
        self._endpoint = endpoint.rstrip("/")
        self._http = httpx.Client(
            headers={
                "Accept": CONTENT_TYPE,
                "Content-Type": CONTENT_TYPE,
                "Authorization": f"token {token}",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CoverallsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _item_url(self, service: str, name: str) -> str:
        return f"{self._endpoint}/api/repos/{service}/{name}"

    def _request(self, method: str, url: str, body: dict | None = None, timeout=_DEFAULT) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=body, timeout=timeout)
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.is_success:
            return response

        logger.debug("Error response received: status=%s body=%s", response.status_code, response.text)
        if response.status_code == 404:
            raise NotFoundError("repository not found")
        raise RemoteError(response.text or f"HTTP {response.status_code}", response.status_code, response.text)

    def _unwrap(self, response: httpx.Response) -> Repository:
        try:
            return RepositoryEnvelope.model_validate(response.json()).repo
        except (ValueError, ValidationError) as exc:
            raise RemoteError(
                "unexpected response format: couldn't read repo envelope",
                response.status_code,
                response.text,
            ) from exc

    def create(self, repository: Repository, timeout=_DEFAULT) -> Repository:
        """POST /api/repos. The response does not include the repository token."""
        logger.debug("Creating coveralls repository %s:%s", repository.service, repository.name)
        response = self._request(
            "POST",
            f"{self._endpoint}/api/repos",
            {"repo": repository.to_payload()},
            timeout,
        )
        return self._unwrap(response)

    def get(self, service: str, name: str, timeout=_DEFAULT) -> Repository:
        """GET /api/repos/{service}/{name}. The only call that returns the token."""
        logger.debug("Retrieving coveralls repository %s:%s", service, name)
        response = self._request("GET", self._item_url(service, name), timeout=timeout)
        try:
            return Repository.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteError(
                "unexpected response format: couldn't read repository",
                response.status_code,
                response.text,
            ) from exc

    def update(self, service: str, name: str, repository: Repository, timeout=_DEFAULT) -> Repository:
        """PUT /api/repos/{service}/{name}. Like create, the token is not returned."""
        logger.debug("Updating coveralls repository %s:%s", service, name)
        response = self._request(
            "PUT",
            self._item_url(service, name),
            {"repo": repository.to_payload()},
            timeout,
        )
        return self._unwrap(response)
