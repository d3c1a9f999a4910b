from typing import List, Optional

from sqlalchemy import Table, and_, false, func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.sql.base import SqlRepository
from tenantkit.adapter.repositories.sql.organization_repository import SqlOrganizationRepository
from tenantkit.adapter.repositories.sql.user_repository import SqlUserRepository
from tenantkit.app.repositories.membership_repository import IOrganizationMembershipRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import MemberWithUserInfo, OrganizationMembership, most_relevant
from tenantkit.domain.pagination import PaginatedResult, PaginationOptions
from tenantkit.domain.schema import MergedSchema


class SqlOrganizationMembershipRepository(
    SqlRepository[OrganizationMembership], IOrganizationMembershipRepository
):
    """Membership repository implementation using SQLAlchemy Core"""

    def __init__(
        self,
        session: AsyncSession,
        table: Table,
        schema: MergedSchema,
        users: SqlUserRepository,
        organizations: SqlOrganizationRepository,
    ):
        super().__init__(session, table, schema, OrganizationMembership)
        self.users = users
        self.organizations = organizations

    def _active(self):
        return and_(
            self.column("joined_at").is_not(None),
            self.column("left_at").is_(None),
            self.column("deleted_at").is_(None),
        )

    def _pending(self):
        return and_(
            self.column("invited_at").is_not(None),
            self.column("joined_at").is_(None),
            self.column("left_at").is_(None),
            self.column("deleted_at").is_(None),
        )

    def _removed(self):
        return or_(
            self.column("left_at").is_not(None),
            self.column("deleted_at").is_not(None),
        )

    def _filters(self, options: PaginationOptions):
        conditions = []
        if options.include_active:
            conditions.append(self._active())
        if options.include_pending:
            conditions.append(self._pending())
        if options.include_removed:
            conditions.append(self._removed())
        return or_(*conditions) if conditions else false()

    @translate_errors
    async def find_by_id(self, membership_id: str) -> Optional[OrganizationMembership]:
        """Get membership by ID"""
        return await self.fetch_one(self.column("id") == membership_id)

    @translate_errors
    async def find_by_user_and_organization(
        self, user_id: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Get the most relevant membership of a user in an organization"""
        return most_relevant(
            await self.fetch_all(
                self.column("user_id") == user_id,
                self.column("organization_id") == organization_id,
            )
        )

    @translate_errors
    async def find_by_username_and_organization(
        self, username: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        """Get membership (or invitation) by username and organization"""
        return most_relevant(
            await self.fetch_all(
                self.column("username") == username,
                self.column("organization_id") == organization_id,
            )
        )

    @translate_errors
    async def find_by_organization(
        self, organization_id: str, active_only: bool = False
    ) -> List[OrganizationMembership]:
        """Get all memberships for an organization"""
        criteria = [self.column("organization_id") == organization_id]
        if active_only:
            criteria.append(self._active())
        return await self.fetch_all(*criteria, order_by=(self.column("created_at"),))

    @translate_errors
    async def find_by_user(self, user_id: str) -> List[OrganizationMembership]:
        """Get all memberships for a user"""
        return await self.fetch_all(
            self.column("user_id") == user_id, order_by=(self.column("created_at"),)
        )

    @translate_errors
    async def find_members_paginated(
        self, organization_id: str, options: Optional[PaginationOptions] = None
    ) -> PaginatedResult[MemberWithUserInfo]:
        options = (options or PaginationOptions()).clamped()
        criteria = and_(
            self.column("organization_id") == organization_id, self._filters(options)
        )

        total = (
            await self.session.execute(
                select(func.count()).select_from(self.table).where(criteria)
            )
        ).scalar_one()

        result = await self.session.execute(
            select(self.table)
            .where(criteria)
            .order_by(self.column("created_at"), self.column("id"))
            .offset(options.offset)
            .limit(options.page_size)
        )
        page = [self.to_entity(row) for row in result.mappings().all()]

        user_ids = [membership.user_id for membership in page if membership.user_id]
        users = {
            user.id: user
            for user in (
                await self.users.fetch_all(self.users.column("id").in_(user_ids))
                if user_ids
                else []
            )
        }
        organization = await self.organizations.fetch_one(
            self.organizations.column("id") == organization_id
        )

        items = [
            MemberWithUserInfo(
                **membership.model_dump(),
                user=users.get(membership.user_id),
                organization=organization,
            )
            for membership in page
        ]
        return PaginatedResult[MemberWithUserInfo].build(items, total, options)

    @translate_errors
    async def insert(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        return await self.insert_entity(membership)

    @translate_errors
    async def update(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        return await self.update_entity(membership)

    @translate_errors
    async def delete(
        self, membership_id: str, context: Optional[OperationContext] = None
    ) -> None:
        await self.delete_by_id(membership_id)
