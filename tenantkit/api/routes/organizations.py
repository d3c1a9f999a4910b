from fastapi import APIRouter, Depends, Request, status

from tenantkit.api.schemas import (
    ListMembersQuery,
    OrganizationPath,
    TransferOwnershipBody,
    UpdateOrganizationBody,
)
from tenantkit.api.utils.use_case_runner import body_schema, run_use_case
from tenantkit.app.use_cases.organizations import CreateOrganizationInput
from tenantkit.container import UseCases
from tenantkit.depends import get_operation_context, get_use_cases
from tenantkit.domain.auth import OperationContext

router = APIRouter(prefix="/organizations")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """
    Create an organization owned by the caller.

    Body: name plus configured custom organization fields.
    """
    use_case = use_cases.create_organization
    return await run_use_case(
        request, use_case, context, body=body_schema(CreateOrganizationInput, use_case)
    )


@router.get("/{organization_id}")
async def get_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request, use_cases.get_organization, context, params=OrganizationPath
    )


@router.patch("/{organization_id}")
async def update_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    use_case = use_cases.update_organization
    return await run_use_case(
        request,
        use_case,
        context,
        params=OrganizationPath,
        body=body_schema(UpdateOrganizationBody, use_case),
    )


@router.delete("/{organization_id}")
async def delete_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request, use_cases.delete_organization, context, params=OrganizationPath
    )


@router.post("/{organization_id}/archive")
async def archive_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request, use_cases.archive_organization, context, params=OrganizationPath
    )


@router.post("/{organization_id}/restore")
async def restore_organization(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(
        request, use_cases.restore_organization, context, params=OrganizationPath
    )


@router.post("/{organization_id}/transfer-ownership")
async def transfer_ownership(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """Body: new_owner_id (user id of an active member)"""
    return await run_use_case(
        request,
        use_cases.transfer_organization_ownership,
        context,
        params=OrganizationPath,
        body=TransferOwnershipBody,
    )


@router.get("/{organization_id}/members")
async def list_members(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """
    Page through members.

    Query: page, page_size, include_active, include_pending, include_removed
    """
    return await run_use_case(
        request,
        use_cases.list_organization_members,
        context,
        params=OrganizationPath,
        query=ListMembersQuery,
    )
