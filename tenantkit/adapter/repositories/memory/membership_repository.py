from typing import List, Optional

from tenantkit.adapter.repositories.errors import translate_errors
from tenantkit.adapter.repositories.memory.base import InMemoryRepository
from tenantkit.adapter.repositories.memory.organization_repository import (
    InMemoryOrganizationRepository,
)
from tenantkit.adapter.repositories.memory.user_repository import InMemoryUserRepository
from tenantkit.app.repositories.membership_repository import IOrganizationMembershipRepository
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import (
    MemberWithUserInfo,
    OrganizationMembership,
    matches_filters,
    most_relevant,
)
from tenantkit.domain.pagination import PaginatedResult, PaginationOptions
from tenantkit.domain.schema import MergedSchema


class InMemoryOrganizationMembershipRepository(
    InMemoryRepository[OrganizationMembership], IOrganizationMembershipRepository
):
    """Membership repository implementation over an in-memory dict"""

    def __init__(
        self,
        schema: MergedSchema,
        users: InMemoryUserRepository,
        organizations: InMemoryOrganizationRepository,
    ):
        super().__init__(schema, OrganizationMembership)
        self.users = users
        self.organizations = organizations

    @translate_errors
    async def find_by_id(self, membership_id: str) -> Optional[OrganizationMembership]:
        return self.get(membership_id)

    @translate_errors
    async def find_by_user_and_organization(
        self, user_id: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        return most_relevant(
            self.select(
                lambda m: m.user_id == user_id and m.organization_id == organization_id
            )
        )

    @translate_errors
    async def find_by_username_and_organization(
        self, username: str, organization_id: str
    ) -> Optional[OrganizationMembership]:
        return most_relevant(
            self.select(
                lambda m: m.username == username and m.organization_id == organization_id
            )
        )

    @translate_errors
    async def find_by_organization(
        self, organization_id: str, active_only: bool = False
    ) -> List[OrganizationMembership]:
        return self.select(
            lambda m: m.organization_id == organization_id and (m.is_active or not active_only)
        )

    @translate_errors
    async def find_by_user(self, user_id: str) -> List[OrganizationMembership]:
        return self.select(lambda m: m.user_id == user_id)

    @translate_errors
    async def find_members_paginated(
        self, organization_id: str, options: Optional[PaginationOptions] = None
    ) -> PaginatedResult[MemberWithUserInfo]:
        options = (options or PaginationOptions()).clamped()

        matching = sorted(
            self.select(
                lambda m: m.organization_id == organization_id
                and matches_filters(
                    m, options.include_active, options.include_pending, options.include_removed
                )
            ),
            key=lambda m: (m.created_at, m.id),
        )
        page = matching[options.offset : options.offset + options.page_size]

        organization = self.organizations.get(organization_id)
        items = [
            MemberWithUserInfo(
                **membership.model_dump(),
                user=self.users.get(membership.user_id) if membership.user_id else None,
                organization=organization,
            )
            for membership in page
        ]
        return PaginatedResult[MemberWithUserInfo].build(items, len(matching), options)

    @translate_errors
    async def insert(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        return self.put_new(membership)

    @translate_errors
    async def update(
        self, membership: OrganizationMembership, context: Optional[OperationContext] = None
    ) -> OrganizationMembership:
        return self.replace(membership)

    @translate_errors
    async def delete(
        self, membership_id: str, context: Optional[OperationContext] = None
    ) -> None:
        self.remove(membership_id)
