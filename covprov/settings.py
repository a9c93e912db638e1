"""Provider settings: explicit value, then the [provider] config table, then COVERALLS_* env vars."""

from collections.abc import Mapping
from pathlib import Path

import tomlkit
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from covprov.client import DEFAULT_ENDPOINT
from covprov.errors import ConfigurationError

DEFAULT_CONFIG = Path("coveralls.toml")
DEFAULT_STATE = Path("coveralls.state.json")


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COVERALLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_token: SecretStr | None = None  # COVERALLS_API_TOKEN
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 30.0


def load_config(path: Path) -> tomlkit.TOMLDocument:
    """Load a TOML configuration file, returning an empty document if missing."""
    if not path.exists():
        return tomlkit.document()
    with path.open() as fh:
        return tomlkit.load(fh)


def _provider_block(config: Mapping | None) -> dict:
    if not config:
        return {}
    block = config.get("provider")
    if not isinstance(block, Mapping):
        return {}
    values = {}
    # "token" mirrors the provider schema attribute; api_token is the settings field
    if block.get("token"):
        values["api_token"] = str(block["token"])
    if "endpoint" in block:
        values["endpoint"] = str(block["endpoint"])
    if "timeout" in block:
        values["timeout"] = float(block["timeout"])
    return values


def get_settings(
    token: str | None = None,
    endpoint: str | None = None,
    config: Mapping | None = None,
) -> ProviderSettings:
    """Resolve provider settings.

    Precedence (highest to lowest):
    1. token / endpoint arguments
    2. [provider] table of the configuration document
    3. COVERALLS_API_TOKEN / COVERALLS_ENDPOINT env vars (and .env in cwd)
    4. defaults
    """
    values = _provider_block(config)
    if token:
        values["api_token"] = token
    if endpoint:
        values["endpoint"] = endpoint

    settings = ProviderSettings(**values)

    if not settings.api_token or not settings.api_token.get_secret_value():
        raise ConfigurationError(
            "Missing Coveralls API token. Set the token in the [provider] section of the "
            "configuration or use the COVERALLS_API_TOKEN environment variable"
        )
    if not settings.endpoint:
        raise ConfigurationError("Coveralls endpoint is empty")
    return settings
