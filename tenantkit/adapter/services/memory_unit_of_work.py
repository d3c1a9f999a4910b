import asyncio
from typing import Any, Dict, Optional

from tenantkit.adapter.repositories.memory.membership_repository import (
    InMemoryOrganizationMembershipRepository,
)
from tenantkit.adapter.repositories.memory.organization_repository import (
    InMemoryOrganizationRepository,
)
from tenantkit.adapter.repositories.memory.user_repository import InMemoryUserRepository
from tenantkit.app.services.unit_of_work import RepositoryBundle, UnitOfWork
from tenantkit.domain.errors import TransactionError
from tenantkit.domain.schema import EntitySchemas


class InMemoryStore:
    """
    Shared state of the in-memory adapter.

    Any repository exposing snapshot()/restore() can be registered and takes
    part in rollback. Transactions are serialized by `lock`.
    """

    def __init__(self, schemas: EntitySchemas):
        self.users = InMemoryUserRepository(schemas.users)
        self.organizations = InMemoryOrganizationRepository(schemas.organizations)
        self.organization_memberships = InMemoryOrganizationMembershipRepository(
            schemas.organization_memberships, self.users, self.organizations
        )
        self.repositories: Dict[str, Any] = {
            "users": self.users,
            "organizations": self.organizations,
            "organization_memberships": self.organization_memberships,
        }
        self.lock = asyncio.Lock()
        self.owner: Optional[asyncio.Task] = None

    def register(self, name: str, repository: Any) -> None:
        self.repositories[name] = repository


class InMemoryUnitOfWork(UnitOfWork):
    """In-memory implementation of UnitOfWork using snapshot/restore rollback"""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self._snapshot: Optional[Dict[str, Any]] = None

    async def __aenter__(self):
        current = asyncio.current_task()
        if self.store.owner is not None and self.store.owner is current:
            raise TransactionError("Nested transactions are not supported")

        await self.store.lock.acquire()
        self.store.owner = current
        self._snapshot = {
            name: repository.snapshot() for name, repository in self.store.repositories.items()
        }
        return self

    async def __aexit__(self, *args):
        self._snapshot = None
        self.store.owner = None
        self.store.lock.release()

    async def commit(self):
        self._snapshot = None

    async def rollback(self):
        if self._snapshot is None:
            return
        for name, state in self._snapshot.items():
            self.store.repositories[name].restore(state)
        self._snapshot = None

    def repositories(self) -> RepositoryBundle:
        return RepositoryBundle(self.store.repositories)


class InMemoryUnitOfWorkFactory:
    """One InMemoryUnitOfWork per call, all sharing `store`"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def __call__(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self.store)
