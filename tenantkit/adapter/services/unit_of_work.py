from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.adapter.repositories.sql.membership_repository import (
    SqlOrganizationMembershipRepository,
)
from tenantkit.adapter.repositories.sql.organization_repository import SqlOrganizationRepository
from tenantkit.adapter.repositories.sql.tables import SqlTables, create_all
from tenantkit.adapter.repositories.sql.user_repository import SqlUserRepository
from tenantkit.app.services.unit_of_work import RepositoryBundle, UnitOfWork
from tenantkit.domain.schema import EntitySchemas


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        tables: SqlTables,
        schemas: EntitySchemas,
    ):
        self.session_factory = session_factory
        self.tables = tables
        self.schemas = schemas
        self.session: Optional[AsyncSession] = None
        self._bundle: Optional[RepositoryBundle] = None

    async def __aenter__(self):
        # One session per transaction, every repository shares it
        self.session = self.session_factory()
        users = SqlUserRepository(self.session, self.tables.users, self.schemas.users)
        organizations = SqlOrganizationRepository(
            self.session, self.tables.organizations, self.schemas.organizations
        )
        memberships = SqlOrganizationMembershipRepository(
            self.session,
            self.tables.organization_memberships,
            self.schemas.organization_memberships,
            users,
            organizations,
        )
        self._bundle = RepositoryBundle(
            {
                "users": users,
                "organizations": organizations,
                "organization_memberships": memberships,
            }
        )
        return self

    async def __aexit__(self, *args):
        await self.session.close()
        self.session = None
        self._bundle = None

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    def repositories(self) -> RepositoryBundle:
        return self._bundle


class SqlAlchemyUnitOfWorkFactory:
    """One SqlAlchemyUnitOfWork (and session) per call"""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        tables: SqlTables,
        schemas: EntitySchemas,
        engine: Optional[AsyncEngine] = None,
    ):
        self.session_factory = session_factory
        self.tables = tables
        self.schemas = schemas
        self.engine = engine

    def __call__(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory, self.tables, self.schemas)

    async def create_all(self) -> None:
        await create_all(self.engine, self.tables)

    async def dispose(self) -> None:
        await self.engine.dispose()
