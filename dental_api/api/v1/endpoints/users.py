"""Staff management endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from dental_api.dependencies import AdminPrincipal, Cache, DatabaseSession
from dental_api.schemas.auth import UserAccessUpdate, UserResponse
from dental_api.services.user_service import UserService

router = APIRouter()


@router.patch(
    "/{user_id}/acceso",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Change a staff member's role or status",
)
async def update_user_access(
    user_id: UUID,
    data: UserAccessUpdate,
    admin: AdminPrincipal,
    db: DatabaseSession,
    cache: Cache,
) -> UserResponse:
    """
    Change the role or account status of a staff member of the clinic.

    Suspended or inactive users can no longer sign in or be booked.
    Administrators only.
    """
    service = UserService(cache)
    user = await service.update_access(
        db, admin.tenant_id, user_id, data, changed_by=admin.user_id
    )
    return UserResponse.model_validate(user)
