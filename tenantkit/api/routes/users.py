from fastapi import APIRouter, Depends, Request, status

from tenantkit.api.utils.use_case_runner import body_schema, run_use_case
from tenantkit.app.use_cases.users import CreateUserInput, UpdateUserInput
from tenantkit.container import UseCases
from tenantkit.depends import get_operation_context, get_use_cases
from tenantkit.domain.auth import OperationContext

router = APIRouter(prefix="/users")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """
    Register the authenticated caller as a user.

    Body: username, optional external_id, plus configured custom user fields.
    """
    use_case = use_cases.create_user
    return await run_use_case(
        request, use_case, context, body=body_schema(CreateUserInput, use_case)
    )


@router.get("/me")
async def get_me(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(request, use_cases.get_user, context)


@router.patch("/me")
async def update_me(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    use_case = use_cases.update_user
    return await run_use_case(
        request, use_case, context, body=body_schema(UpdateUserInput, use_case)
    )


@router.delete("/me")
async def delete_me(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    """Soft delete the caller, their owned organizations and their memberships"""
    return await run_use_case(request, use_cases.delete_user, context)


@router.get("/me/organizations")
async def list_my_organizations(
    request: Request,
    use_cases: UseCases = Depends(get_use_cases),
    context: OperationContext = Depends(get_operation_context),
):
    return await run_use_case(request, use_cases.list_user_organizations, context)
