from unittest.mock import patch

import pytest
from pydantic import BaseModel, Field

from tenantkit.container import ToolkitOptions, build_in_memory_adapters, build_use_cases
from tenantkit.domain.entities import OrganizationRole, OrganizationStatus
from tenantkit.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from tenantkit.domain.schema import CustomFieldsConfig


class Billing(BaseModel):
    plan_tier: str = Field(default="free", min_length=3)


async def user_id_of(store, username):
    return (await store.users.find_by_username(username)).id


async def role_of(store, username, organization_id):
    membership = await store.organization_memberships.find_by_user_and_organization(
        await user_id_of(store, username), organization_id
    )
    return membership.role


# ----------------------------------------------------------------------------
# create / get
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_organization_makes_caller_owner(use_cases, store, owner_ctx):
    owner = await use_cases.create_user({"username": "owner"}, owner_ctx)

    organization = await use_cases.create_organization({"name": "Acme"}, owner_ctx)

    assert organization.owner_user_id == owner.id
    assert organization.status == OrganizationStatus.active
    membership = await store.organization_memberships.find_by_user_and_organization(
        owner.id, organization.id
    )
    assert membership.role == OrganizationRole.owner
    assert membership.is_active


@pytest.mark.asyncio
async def test_create_organization_requires_registered_user(use_cases, store, owner_ctx):
    with pytest.raises(NotFoundError):
        await use_cases.create_organization({"name": "Acme"}, owner_ctx)

    assert store.organizations.rows == {}


@pytest.mark.asyncio
async def test_create_organization_with_custom_fields(owner_ctx):
    options = ToolkitOptions(organizations=CustomFieldsConfig(custom_schema=Billing))
    use_cases = build_use_cases(build_in_memory_adapters(options), options)
    await use_cases.create_user({"username": "owner"}, owner_ctx)

    organization = await use_cases.create_organization(
        {"name": "Acme", "plan_tier": "enterprise"}, owner_ctx
    )
    fetched = await use_cases.get_organization({"organization_id": organization.id}, owner_ctx)

    assert fetched.plan_tier == "enterprise"


@pytest.mark.asyncio
async def test_get_organization_for_members(use_cases, organization, member_ctx):
    fetched = await use_cases.get_organization({"organization_id": organization.id}, member_ctx)

    assert fetched.id == organization.id


@pytest.mark.asyncio
async def test_get_organization_for_outsider_is_forbidden(use_cases, organization, outsider_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.get_organization({"organization_id": organization.id}, outsider_ctx)


@pytest.mark.asyncio
async def test_get_unknown_or_deleted_organization_is_not_found(
    use_cases, organization, owner_ctx
):
    with pytest.raises(NotFoundError):
        await use_cases.get_organization({"organization_id": "missing"}, owner_ctx)

    await use_cases.delete_organization({"organization_id": organization.id}, owner_ctx)

    with pytest.raises(NotFoundError):
        await use_cases.get_organization({"organization_id": organization.id}, owner_ctx)


# ----------------------------------------------------------------------------
# update / delete
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_can_update_organization(use_cases, organization, admin_ctx):
    updated = await use_cases.update_organization(
        {"organization_id": organization.id, "name": "Acme Corp"}, admin_ctx
    )

    assert updated.name == "Acme Corp"
    assert updated.owner_user_id == organization.owner_user_id


@pytest.mark.asyncio
async def test_member_cannot_update_organization(use_cases, organization, member_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.update_organization(
            {"organization_id": organization.id, "name": "Hijacked"}, member_ctx
        )


@pytest.mark.asyncio
async def test_update_organization_without_changes_is_invalid(use_cases, organization, owner_ctx):
    with pytest.raises(ValidationError):
        await use_cases.update_organization({"organization_id": organization.id}, owner_ctx)


@pytest.mark.asyncio
async def test_update_organization_rejects_null_name(use_cases, organization, owner_ctx):
    with pytest.raises(ValidationError) as exc_info:
        await use_cases.update_organization(
            {"organization_id": organization.id, "name": None}, owner_ctx
        )

    assert [issue.path for issue in exc_info.value.issues] == ["name"]
    fetched = await use_cases.get_organization({"organization_id": organization.id}, owner_ctx)
    assert fetched.name == organization.name


@pytest.mark.asyncio
async def test_update_organization_enforces_custom_field_constraints(owner_ctx):
    options = ToolkitOptions(organizations=CustomFieldsConfig(custom_schema=Billing))
    use_cases = build_use_cases(build_in_memory_adapters(options), options)
    await use_cases.create_user({"username": "owner"}, owner_ctx)
    organization = await use_cases.create_organization(
        {"name": "Acme", "plan_tier": "enterprise"}, owner_ctx
    )

    for plan_tier in ("x", None):
        with pytest.raises(ValidationError) as exc_info:
            await use_cases.update_organization(
                {"organization_id": organization.id, "plan_tier": plan_tier}, owner_ctx
            )
        assert [issue.path for issue in exc_info.value.issues] == ["plan_tier"]

    fetched = await use_cases.get_organization({"organization_id": organization.id}, owner_ctx)
    assert fetched.plan_tier == "enterprise"

    updated = await use_cases.update_organization(
        {"organization_id": organization.id, "plan_tier": "pro"}, owner_ctx
    )
    assert updated.plan_tier == "pro"
    assert updated.name == "Acme"


@pytest.mark.asyncio
async def test_archived_organization_cannot_be_updated(use_cases, organization, owner_ctx):
    await use_cases.archive_organization({"organization_id": organization.id}, owner_ctx)

    with pytest.raises(ConflictError):
        await use_cases.update_organization(
            {"organization_id": organization.id, "name": "Renamed"}, owner_ctx
        )


@pytest.mark.asyncio
async def test_only_owner_deletes_organization(use_cases, store, organization, owner_ctx, admin_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.delete_organization({"organization_id": organization.id}, admin_ctx)

    deleted = await use_cases.delete_organization({"organization_id": organization.id}, owner_ctx)

    assert deleted.deleted_at is not None
    # Memberships are left untouched
    assert await role_of(store, "admin", organization.id) == OrganizationRole.admin


@pytest.mark.asyncio
async def test_deleting_twice_conflicts(use_cases, organization, owner_ctx):
    await use_cases.delete_organization({"organization_id": organization.id}, owner_ctx)

    with pytest.raises(ConflictError):
        await use_cases.delete_organization({"organization_id": organization.id}, owner_ctx)


# ----------------------------------------------------------------------------
# archive / restore
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_archive_and_restore(use_cases, organization, owner_ctx, admin_ctx):
    archived = await use_cases.archive_organization(
        {"organization_id": organization.id}, admin_ctx
    )

    assert archived.status == OrganizationStatus.archived
    assert archived.archived_at is not None

    with pytest.raises(ConflictError):
        await use_cases.archive_organization({"organization_id": organization.id}, owner_ctx)
    with pytest.raises(ForbiddenError):
        await use_cases.restore_organization({"organization_id": organization.id}, admin_ctx)

    restored = await use_cases.restore_organization({"organization_id": organization.id}, owner_ctx)

    assert restored.status == OrganizationStatus.active
    assert restored.archived_at is None


@pytest.mark.asyncio
async def test_member_cannot_archive(use_cases, organization, member_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.archive_organization({"organization_id": organization.id}, member_ctx)


@pytest.mark.asyncio
async def test_restore_requires_archived_organization(use_cases, organization, owner_ctx):
    with pytest.raises(ConflictError):
        await use_cases.restore_organization({"organization_id": organization.id}, owner_ctx)

    await use_cases.archive_organization({"organization_id": organization.id}, owner_ctx)
    await use_cases.delete_organization({"organization_id": organization.id}, owner_ctx)

    with pytest.raises(ConflictError):
        await use_cases.restore_organization({"organization_id": organization.id}, owner_ctx)


# ----------------------------------------------------------------------------
# transfer_organization_ownership
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_transfer_swaps_owner_and_roles(use_cases, store, organization, owner_ctx):
    member_id = await user_id_of(store, "member")

    transferred = await use_cases.transfer_organization_ownership(
        {"organization_id": organization.id, "new_owner_id": member_id}, owner_ctx
    )

    assert transferred.owner_user_id == member_id
    assert await role_of(store, "member", organization.id) == OrganizationRole.owner
    assert await role_of(store, "owner", organization.id) == OrganizationRole.member
    # The former owner stays an active member
    await use_cases.get_organization({"organization_id": organization.id}, owner_ctx)


@pytest.mark.asyncio
async def test_transfer_to_self_is_invalid(use_cases, organization, owner_ctx):
    with pytest.raises(ValidationError) as exc_info:
        await use_cases.transfer_organization_ownership(
            {"organization_id": organization.id, "new_owner_id": organization.owner_user_id},
            owner_ctx,
        )

    assert exc_info.value.issues[0].path == "new_owner_id"


@pytest.mark.asyncio
async def test_transfer_to_non_member_conflicts(use_cases, store, organization, owner_ctx):
    outsider_id = await user_id_of(store, "outsider")

    with pytest.raises(ConflictError):
        await use_cases.transfer_organization_ownership(
            {"organization_id": organization.id, "new_owner_id": outsider_id}, owner_ctx
        )


@pytest.mark.asyncio
async def test_transfer_to_unknown_user_is_not_found(use_cases, organization, owner_ctx):
    with pytest.raises(NotFoundError):
        await use_cases.transfer_organization_ownership(
            {"organization_id": organization.id, "new_owner_id": "missing"}, owner_ctx
        )


@pytest.mark.asyncio
async def test_only_owner_transfers(use_cases, store, organization, admin_ctx):
    admin_id = await user_id_of(store, "admin")

    with pytest.raises(ForbiddenError):
        await use_cases.transfer_organization_ownership(
            {"organization_id": organization.id, "new_owner_id": admin_id}, admin_ctx
        )


@pytest.mark.asyncio
async def test_transfer_is_atomic(use_cases, store, organization, owner_ctx):
    member_id = await user_id_of(store, "member")
    memberships = store.organization_memberships
    original_update = memberships.update
    calls = []

    async def failing_second_update(membership, context=None):
        calls.append(membership.id)
        if len(calls) == 2:
            raise PersistenceError("write failed")
        return await original_update(membership, context)

    with patch.object(memberships, "update", new=failing_second_update):
        with pytest.raises(PersistenceError):
            await use_cases.transfer_organization_ownership(
                {"organization_id": organization.id, "new_owner_id": member_id}, owner_ctx
            )

    reloaded = await store.organizations.find_by_id(organization.id)
    assert reloaded.owner_user_id == organization.owner_user_id
    assert await role_of(store, "owner", organization.id) == OrganizationRole.owner
    assert await role_of(store, "member", organization.id) == OrganizationRole.member


# ----------------------------------------------------------------------------
# list_organization_members
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_members_returns_active_members_with_users(use_cases, organization, member_ctx):
    result = await use_cases.list_organization_members(
        {"organization_id": organization.id}, member_ctx
    )

    assert result.total == 3
    assert result.page == 1
    assert sorted(item.user.username for item in result.items) == ["admin", "member", "owner"]
    assert all(item.organization.id == organization.id for item in result.items)


@pytest.mark.asyncio
async def test_admin_can_include_pending_invitations(
    use_cases, organization, owner_ctx, admin_ctx
):
    await use_cases.add_organization_member(
        {"organization_id": organization.id, "username": "newcomer"}, owner_ctx
    )

    result = await use_cases.list_organization_members(
        {"organization_id": organization.id, "include_pending": True}, admin_ctx
    )

    pending = [item for item in result.items if item.is_pending]
    assert [item.username for item in pending] == ["newcomer"]
    assert pending[0].user is None


@pytest.mark.asyncio
async def test_member_cannot_include_removed(use_cases, organization, member_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.list_organization_members(
            {"organization_id": organization.id, "include_removed": True}, member_ctx
        )


@pytest.mark.asyncio
async def test_outsider_cannot_list_members(use_cases, organization, outsider_ctx):
    with pytest.raises(ForbiddenError):
        await use_cases.list_organization_members(
            {"organization_id": organization.id}, outsider_ctx
        )


@pytest.mark.asyncio
async def test_page_size_is_defaulted_and_capped(use_cases, organization, owner_ctx):
    default = await use_cases.list_organization_members(
        {"organization_id": organization.id}, owner_ctx
    )
    capped = await use_cases.list_organization_members(
        {"organization_id": organization.id, "page_size": 1000}, owner_ctx
    )
    second = await use_cases.list_organization_members(
        {"organization_id": organization.id, "page": 2, "page_size": 2}, owner_ctx
    )

    assert default.page_size == 20
    assert capped.page_size == 100
    assert len(second.items) == 1
    assert second.total_pages == 2


@pytest.mark.asyncio
async def test_invalid_page_is_rejected(use_cases, organization, owner_ctx):
    with pytest.raises(ValidationError) as exc_info:
        await use_cases.list_organization_members(
            {"organization_id": organization.id, "page": 0}, owner_ctx
        )

    assert exc_info.value.issues[0].path == "page"
