"""Working-hours configuration endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from dental_api.dependencies import AdminPrincipal, Cache, CurrentPrincipal, DatabaseSession
from dental_api.schemas.schedule_config import (
    ScheduleConfigResponse,
    ScheduleUpsertResponse,
    UpsertScheduleConfigRequest,
    WorkHoursResponse,
)
from dental_api.services.schedule_config_service import ScheduleConfigService

router = APIRouter()


@router.get(
    "",
    response_model=list[ScheduleConfigResponse],
    status_code=status.HTTP_200_OK,
    summary="Weekly working hours",
)
async def get_schedule(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    cache: Cache,
    usuario_id: UUID | None = Query(None, alias="usuarioId"),
) -> list[ScheduleConfigResponse]:
    """Working hours of one practitioner, or the clinic-wide defaults without ``usuarioId``."""
    service = ScheduleConfigService(db, cache)
    return await service.get_schedule(current_user.tenant_id, usuario_id)


@router.get(
    "/work-hours",
    response_model=WorkHoursResponse,
    status_code=status.HTTP_200_OK,
    summary="Clinic opening window",
)
async def get_work_hours(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    cache: Cache,
) -> WorkHoursResponse:
    """Earliest opening and latest closing across the clinic's active dentists."""
    service = ScheduleConfigService(db, cache)
    start, end = await service.get_consolidated_work_hours(current_user.tenant_id)
    return WorkHoursResponse(
        work_day_start=start.strftime("%H:%M"),
        work_day_end=end.strftime("%H:%M"),
    )


@router.post(
    "/upsert",
    response_model=ScheduleUpsertResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace working hours by day",
)
async def upsert_schedule(
    request: UpsertScheduleConfigRequest,
    admin: AdminPrincipal,
    db: DatabaseSession,
    cache: Cache,
) -> ScheduleUpsertResponse:
    """
    Replace the working hours of the listed weekdays.

    Weekdays not listed keep their current configuration. Administrators only.
    """
    service = ScheduleConfigService(db, cache)
    rows = await service.upsert_schedule(
        admin.tenant_id, request.practitioner_id, request.configurations
    )
    return ScheduleUpsertResponse(
        message="Schedule configuration saved",
        configurations=rows,
    )
