"""Abstract lifecycle contract for managed resources."""

from abc import ABC, abstractmethod

from covprov.models import RepositoryState, ResourceResponse


class ManagedResource(ABC):
    @abstractmethod
    def create(self, plan: RepositoryState) -> ResourceResponse: ...

    @abstractmethod
    def read(self, state: RepositoryState) -> ResourceResponse: ...

    @abstractmethod
    def update(self, plan: RepositoryState) -> ResourceResponse: ...

    @abstractmethod
    def delete(self, state: RepositoryState) -> ResourceResponse: ...

    @abstractmethod
    def import_state(self, identifier: str) -> ResourceResponse: ...
