"""Patient endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from dental_api.dependencies import CurrentPrincipal, DatabaseSession
from dental_api.schemas.patients import PatientCreate, PatientListResponse, PatientResponse
from dental_api.services.patient_service import PatientService

router = APIRouter()


@router.post(
    "",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a patient",
)
async def create_patient(
    data: PatientCreate,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> PatientResponse:
    """Register a patient in the caller's clinic."""
    service = PatientService(db)
    return await service.create_patient(current_user.tenant_id, data)


@router.get(
    "",
    response_model=PatientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List patients",
)
async def list_patients(
    current_user: CurrentPrincipal,
    db: DatabaseSession,
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> PatientListResponse:
    """List patients with optional search by name or document number."""
    service = PatientService(db)
    return await service.list_patients(current_user.tenant_id, search, page, page_size)


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    summary="Get patient by ID",
)
async def get_patient(
    patient_id: UUID,
    current_user: CurrentPrincipal,
    db: DatabaseSession,
) -> PatientResponse:
    """Get a specific patient by ID."""
    service = PatientService(db)
    return await service.get_patient(current_user.tenant_id, patient_id)
