"""Unauthenticated endpoints for online booking pages."""

from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from dental_api.dependencies import Cache, DatabaseSession
from dental_api.services.availability_service import AvailabilityService

router = APIRouter()


@router.get(
    "/horarios-disponibles",
    response_model=list[datetime],
    status_code=status.HTTP_200_OK,
    summary="Free slots by clinic subdomain",
)
async def get_public_available_slots(
    db: DatabaseSession,
    cache: Cache,
    subdomain: str = Query(..., min_length=1, max_length=100),
    fecha: date = Query(...),
    usuario_id: UUID | None = Query(None, alias="usuarioId"),
) -> list[datetime]:
    """Bookable start times for a clinic identified by its subdomain."""
    service = AvailabilityService(db, cache)
    return await service.get_public_available_slots(subdomain, fecha, usuario_id)
