"""Composite identifier for a managed repository: ``<service>:<name>``."""

from covprov.errors import MalformedIdentifierError

SEPARATOR = ":"


def encode(service: str, name: str) -> str:
    """Return the identifier for a repository.

    ``service`` must not contain the separator. ``name`` may, since decoding
    splits on the first occurrence only.
    """
    if not service or not name:
        raise MalformedIdentifierError(
            f"Cannot build identifier from service={service!r} name={name!r}: both are required"
        )
    if SEPARATOR in service:
        raise MalformedIdentifierError(f"Service {service!r} must not contain {SEPARATOR!r}")
    return f"{service}{SEPARATOR}{name}"


def decode(identifier: str) -> tuple[str, str]:
    """Split an identifier into (service, name)."""
    service, sep, name = identifier.partition(SEPARATOR)
    if not sep or not service or not name:
        raise MalformedIdentifierError(
            f"Unexpected identifier {identifier!r}: expected <service>{SEPARATOR}<owner>/<repo>"
        )
    return service, name
