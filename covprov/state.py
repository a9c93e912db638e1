"""JSON state file: ``{label: RepositoryState}``."""

from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from covprov.errors import ConfigurationError
from covprov.models import RepositoryState

_STATE = TypeAdapter(dict[str, RepositoryState])


def load_state(path: Path) -> dict[str, RepositoryState]:
    if not path.exists():
        return {}
    try:
        return _STATE.validate_json(path.read_text())
    except ValidationError as exc:
        raise ConfigurationError(f"State file {path} is not valid: {exc}") from exc


def save_state(path: Path, states: dict[str, RepositoryState]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_STATE.dump_json(states, by_alias=True, indent=2) + b"\n")
