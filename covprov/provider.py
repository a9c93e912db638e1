"""Provider bootstrap: one configured client shared by every resource and data source."""

from dataclasses import dataclass

from covprov.client import CoverallsClient
from covprov.resources.data_source import RepositoryDataSource
from covprov.resources.repository import RepositoryResource
from covprov.settings import ProviderSettings


@dataclass(frozen=True)
class CoverallsProvider:
    client: CoverallsClient

    @classmethod
    def from_settings(cls, settings: ProviderSettings) -> "CoverallsProvider":
        token = settings.api_token.get_secret_value() if settings.api_token else ""
        return cls(CoverallsClient(token, settings.endpoint, timeout=settings.timeout))

    def repository_resource(self) -> RepositoryResource:
        return RepositoryResource(self.client)

    def repository_data_source(self) -> RepositoryDataSource:
        return RepositoryDataSource(self.client)

    def close(self) -> None:
        self.client.close()
