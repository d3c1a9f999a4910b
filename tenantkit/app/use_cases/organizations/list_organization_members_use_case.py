from typing import Optional

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.app.use_cases.base import BaseUseCase
from tenantkit.app.use_cases.helpers import get_actor_role, get_current_user, get_organization
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import MemberWithUserInfo, OrganizationRole
from tenantkit.domain.errors import ForbiddenError, NotFoundError
from tenantkit.domain.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PaginatedResult,
    PaginationOptions,
)

from .dtos import ListOrganizationMembersInput


class ListOrganizationMembersUseCase(
    BaseUseCase[ListOrganizationMembersInput, PaginatedResult[MemberWithUserInfo]]
):
    """
    Use case for paging through an organization's members.

    Business Rules:
    - Owner or active members only
    - Only owners and admins may include pending invitations and removed members
    - page_size defaults to default_page_size and is capped at max_page_size
    """

    name = "list_organization_members"
    input_model = ListOrganizationMembersInput

    def __init__(
        self,
        *args,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def handle(
        self,
        input: ListOrganizationMembersInput,
        repos: RepositoryBundle,
        context: OperationContext,
    ) -> PaginatedResult[MemberWithUserInfo]:
        organization = await get_organization(repos, input.organization_id)
        if organization.is_deleted:
            raise NotFoundError("Organization", input.organization_id)

        user = await get_current_user(repos, context)
        role: Optional[OrganizationRole] = await get_actor_role(repos, organization, user)
        if role is None:
            raise ForbiddenError(
                "Only organization owner or active organization members can list members"
            )
        if (input.include_pending or input.include_removed) and role == OrganizationRole.member:
            raise ForbiddenError(
                "Only organization owners and admins can list pending or removed members"
            )

        options = PaginationOptions(
            page=input.page,
            page_size=input.page_size or self.default_page_size,
            include_active=input.include_active,
            include_pending=input.include_pending,
            include_removed=input.include_removed,
        ).clamped(self.max_page_size)
        return await repos.organization_memberships.find_members_paginated(
            organization.id, options
        )
