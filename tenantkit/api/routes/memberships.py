from fastapi import APIRouter, Depends, Request, status

from tenantkit.api.schemas import (
    AcceptInvitationBody,
    AddMemberBody,
    MemberPath,
    OrganizationPath,
    RemoveMemberQuery,
    UpdateRoleBody,
)
from tenantkit.api.utils.use_case_runner import body_schema, run_use_case
from tenantkit.container import UseCases
from tenantkit.depends import get_operation_context, get_use_cases
from tenantkit.domain.auth import OperationContext

router = APIRouter(prefix="/organizations/{organization_id}")


@router.post("/members", status_code=status.HTTP_201_CREATED)
async def add_member(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """Invite by username. Body: username, role (admin or member)"""
    use_case = use_cases.add_organization_member
    return await run_use_case(
        request,
        use_case,
        context,
        params=OrganizationPath,
        body=body_schema(AddMemberBody, use_case),
    )


@router.post("/accept")
async def accept_invitation(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request,
        use_cases.accept_organization_invitation,
        context,
        params=OrganizationPath,
        body=AcceptInvitationBody,
    )


@router.put("/members/{user_id}/role")
async def update_member_role(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request,
        use_cases.update_organization_member_role,
        context,
        params=MemberPath,
        body=UpdateRoleBody,
    )


# Registered before /members/{user_id} so "me" is not taken for a user id
@router.delete("/members/me")
async def leave_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request, use_cases.leave_organization, context, params=OrganizationPath
    )


@router.delete("/members/{user_id}")
async def remove_member(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """Query: by_username=true to revoke an invitation sent to an unregistered username"""
    return await run_use_case(
        request,
        use_cases.remove_organization_member,
        context,
        params=MemberPath,
        query=RemoveMemberQuery,
    )
