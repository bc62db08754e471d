"""Appointment endpoints."""

from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, Body, Query, status

from dental_api.core.exceptions import BadRequestException
from dental_api.dependencies import Cache, CurrentPrincipal, DatabaseSession
from dental_api.schemas.appointments import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentUpdate,
    StatusChangeResponse,
)
from dental_api.services.appointment_service import AppointmentService
from dental_api.services.availability_service import AvailabilityService

router = APIRouter()


@router.get(
    "/disponibles",
    response_model=list[datetime],
    status_code=status.HTTP_200_OK,
    summary="Free slots for a day",
)
async def get_available_slots(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    cache: Cache,
    fecha: date = Query(..., description="Day to inspect"),
    usuario_id: UUID | None = Query(None, alias="usuarioId"),
) -> list[datetime]:
    """
    List bookable start times for a day.

    Without ``usuarioId`` any appointment in the clinic blocks its time;
    with it, only that practitioner's appointments do.
    """
    service = AvailabilityService(db, cache)
    return await service.get_available_slots(current_user.tenant_id, fecha, usuario_id)


@router.get(
    "/rango",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="Appointments in a date range",
)
async def list_appointments_by_range(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    fecha_inicio: date = Query(..., alias="fechaInicio"),
    fecha_fin: date = Query(..., alias="fechaFin"),
    usuario_id: UUID | None = Query(None, alias="usuarioId"),
) -> list[AppointmentResponse]:
    """List appointments between two dates (inclusive), earliest first."""
    service = AppointmentService(db)
    return await service.list_by_date_range(
        current_user.tenant_id, fecha_inicio, fecha_fin, usuario_id
    )


@router.get(
    "/paciente/{paciente_id}",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="Appointments of a patient",
)
async def list_patient_appointments(
    paciente_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> list[AppointmentResponse]:
    """List a patient's appointments, newest first."""
    service = AppointmentService(db)
    return await service.list_by_patient(current_user.tenant_id, paciente_id)


@router.get(
    "",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    summary="List appointments",
)
async def list_appointments(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    estado: str | None = Query(None, description="Filter by status"),
) -> list[AppointmentResponse]:
    """
    List appointments, newest first.

    Administrators see every appointment in the clinic; other staff see the
    appointments booked with them.
    """
    status_filter = None
    if estado:
        try:
            status_filter = AppointmentStatus.parse(estado)
        except ValueError as e:
            raise BadRequestException(str(e)) from e

    service = AppointmentService(db)
    return await service.list_appointments(current_user, status_filter)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Get a specific appointment by ID."""
    service = AppointmentService(db)
    return await service.get_appointment(current_user.tenant_id, appointment_id)


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Book an appointment.

    Fails with 400 when the patient or the practitioner already has an
    overlapping active appointment.
    """
    service = AppointmentService(db)
    return await service.create_appointment(current_user.tenant_id, data)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Update an appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Replace an appointment's booking details. Cancelled appointments cannot be updated."""
    service = AppointmentService(db)
    return await service.update_appointment(current_user.tenant_id, appointment_id, data)


@router.post(
    "/{appointment_id}/confirmar",
    response_model=StatusChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Confirm an appointment",
)
async def confirm_appointment(
    appointment_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> StatusChangeResponse:
    """Confirm a scheduled appointment."""
    service = AppointmentService(db)
    new_status = await service.confirm_appointment(current_user.tenant_id, appointment_id)
    return StatusChangeResponse(message="Appointment confirmed", status=new_status)


@router.post(
    "/{appointment_id}/cancelar",
    response_model=StatusChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel an appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    data: AppointmentCancel | None = Body(None),
) -> StatusChangeResponse:
    """Cancel an appointment and free its time. An optional ``motivo`` is stored."""
    service = AppointmentService(db)
    new_status = await service.cancel_appointment(
        current_user.tenant_id, appointment_id, data.reason if data else None
    )
    return StatusChangeResponse(message="Appointment cancelled", status=new_status)


@router.post(
    "/{appointment_id}/completar",
    response_model=StatusChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete an appointment",
)
async def complete_appointment(
    appointment_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> StatusChangeResponse:
    """Mark an appointment as attended."""
    service = AppointmentService(db)
    new_status = await service.complete_appointment(current_user.tenant_id, appointment_id)
    return StatusChangeResponse(message="Appointment completed", status=new_status)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> None:
    """Soft delete an appointment; its time becomes bookable again."""
    service = AppointmentService(db)
    await service.delete_appointment(current_user.tenant_id, appointment_id)
