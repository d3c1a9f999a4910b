"""
Use Case Helpers

Lookups and permission checks shared by the organization and membership use
cases. All of them run inside the use case's transaction.
"""

from typing import Optional

from tenantkit.app.services.unit_of_work import RepositoryBundle
from tenantkit.domain.auth import OperationContext
from tenantkit.domain.entities import (
    Organization,
    OrganizationMembership,
    OrganizationRole,
    User,
)
from tenantkit.domain.errors import ConflictError, NotFoundError


async def get_current_user(repos: RepositoryBundle, context: OperationContext) -> User:
    """Registered, non-deleted user behind the request's principal"""
    external_id = context.actor.external_id
    user = await repos.users.find_by_external_id(external_id)
    if user is None or user.is_deleted:
        raise NotFoundError("User", external_id)
    return user


async def get_organization(repos: RepositoryBundle, organization_id: str) -> Organization:
    organization = await repos.organizations.find_by_id(organization_id)
    if organization is None:
        raise NotFoundError("Organization", organization_id)
    return organization


def ensure_not_deleted(organization: Organization, action: str) -> None:
    if organization.is_deleted:
        raise ConflictError(
            f"Cannot {action} a deleted organization", {"organization_id": organization.id}
        )


def ensure_writable(organization: Organization, action: str) -> None:
    """Deleted and archived organizations are read-only"""
    ensure_not_deleted(organization, action)
    if organization.is_archived:
        raise ConflictError(
            f"Cannot {action} an archived organization", {"organization_id": organization.id}
        )


async def get_active_membership(
    repos: RepositoryBundle, user_id: str, organization_id: str
) -> Optional[OrganizationMembership]:
    membership = await repos.organization_memberships.find_by_user_and_organization(
        user_id, organization_id
    )
    if membership is not None and membership.is_active:
        return membership
    return None


async def get_actor_role(
    repos: RepositoryBundle, organization: Organization, user: User
) -> Optional[OrganizationRole]:
    """Owner by organization record, otherwise the role of an active membership"""
    if organization.owner_user_id == user.id:
        return OrganizationRole.owner
    membership = await get_active_membership(repos, user.id, organization.id)
    return membership.role if membership is not None else None
