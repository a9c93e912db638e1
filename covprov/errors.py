"""Error taxonomy shared by the client, the resources and the CLI."""


class CoverallsError(Exception):
    condition = "error"


class ConfigurationError(CoverallsError):
    """Missing or unusable credential or endpoint. Raised before any network call."""

    condition = "configuration"


class TransportError(CoverallsError):
    """DNS, TLS, timeout or connection failure. Never retried here."""

    condition = "transport"


class NotFoundError(CoverallsError):
    condition = "not_found"


class RemoteError(CoverallsError):
    """Non-success response other than 404, with the raw body kept for diagnostics."""

    condition = "remote"

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedIdentifierError(CoverallsError):
    condition = "malformed_identifier"
