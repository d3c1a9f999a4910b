from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from tenantkit.app.services.unit_of_work import RepositoryBundle, UnitOfWork
from tenantkit.container import ToolkitOptions, build_in_memory_adapters, build_use_cases
from tests.fixtures.builders import SequentialUuid, TickingClock, make_context


@pytest.fixture
def mock_uow():
    """UnitOfWork double whose commit/rollback can be made to fail"""

    class MockUnitOfWork(UnitOfWork):
        def __init__(self):
            self.bundle = RepositoryBundle({"users": MagicMock()})
            self.enter = AsyncMock()
            self.exit = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
            self.commit = AsyncMock()
            self.rollback = AsyncMock()

        async def __aenter__(self):
            await self.enter()
            return self

        async def __aexit__(self, *args):
            return await self.exit(*args)

        async def commit(self):
            pass

        async def rollback(self):
            pass

        def repositories(self):
            return self.bundle

    return MockUnitOfWork()


@pytest.fixture
def options():
    return ToolkitOptions()


@pytest.fixture
def adapters(options):
    return build_in_memory_adapters(options, clock=TickingClock(), uuid=SequentialUuid())


@pytest.fixture
def store(adapters):
    return adapters.unit_of_work_factory.store


@pytest.fixture
def use_cases(adapters, options):
    return build_use_cases(adapters, options)


@pytest.fixture
def owner_ctx():
    return make_context("ext-owner")


@pytest.fixture
def admin_ctx():
    return make_context("ext-admin")


@pytest.fixture
def member_ctx():
    return make_context("ext-member")


@pytest.fixture
def outsider_ctx():
    return make_context("ext-outsider")


@pytest_asyncio.fixture
async def organization(use_cases, owner_ctx, admin_ctx, member_ctx, outsider_ctx):
    """
    Organization "Acme" owned by owner, with an active admin and member, and a
    registered outsider with no membership.
    """
    await use_cases.create_user({"username": "owner"}, owner_ctx)
    await use_cases.create_user({"username": "admin"}, admin_ctx)
    await use_cases.create_user({"username": "member"}, member_ctx)
    await use_cases.create_user({"username": "outsider"}, outsider_ctx)

    organization = await use_cases.create_organization({"name": "Acme"}, owner_ctx)
    await use_cases.add_organization_member(
        {"organization_id": organization.id, "username": "admin", "role": "admin"}, owner_ctx
    )
    await use_cases.accept_organization_invitation({"organization_id": organization.id}, admin_ctx)
    await use_cases.add_organization_member(
        {"organization_id": organization.id, "username": "member"}, owner_ctx
    )
    await use_cases.accept_organization_invitation({"organization_id": organization.id}, member_ctx)
    return organization
