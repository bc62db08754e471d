"""Patient service for business logic."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from dental_api.core.exceptions import BadRequestException, NotFoundException
from dental_api.models.patients import patients
from dental_api.schemas.patients import PatientCreate, PatientListResponse, PatientResponse

logger = structlog.get_logger(__name__)


class PatientService:
    """Service for managing the clinic's patient registry."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_patient(self, tenant_id: UUID, data: PatientCreate) -> PatientResponse:
        """
        Register a patient.

        Raises:
            BadRequestException: If the document number is already registered
        """
        existing = await self.db.execute(
            select(patients.c.id).where(
                patients.c.tenant_id == tenant_id,
                patients.c.document_number == data.document_number,
            )
        )
        if existing.first() is not None:
            raise BadRequestException("A patient with this document number already exists")

        stmt = (
            patients.insert()
            .values(
                tenant_id=tenant_id,
                **data.model_dump(),
                is_active=True,
                created_at=datetime.now(UTC),
            )
            .returning(patients)
        )
        result = await self.db.execute(stmt)
        row = result.mappings().one()
        await self.db.commit()

        logger.info("patient_created", patient_id=str(row["id"]), tenant_id=str(tenant_id))
        return PatientResponse.model_validate(dict(row))

    async def get_patient(self, tenant_id: UUID, patient_id: UUID) -> PatientResponse:
        """
        Get a patient of the clinic.

        Raises:
            NotFoundException: If the patient does not exist in this clinic or was deleted
        """
        stmt = select(patients).where(
            patients.c.id == patient_id,
            patients.c.tenant_id == tenant_id,
            patients.c.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        row = result.mappings().first()

        if not row:
            raise NotFoundException("Patient not found")

        return PatientResponse.model_validate(dict(row))

    async def list_patients(
        self,
        tenant_id: UUID,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> PatientListResponse:
        """List patients with optional name/document search and pagination."""
        conditions = [patients.c.tenant_id == tenant_id, patients.c.deleted_at.is_(None)]

        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    patients.c.first_name.ilike(pattern),
                    patients.c.last_name.ilike(pattern),
                    patients.c.document_number.ilike(pattern),
                )
            )

        count_stmt = select(func.count()).select_from(patients).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        offset = (page - 1) * page_size
        stmt = (
            select(patients)
            .where(*conditions)
            .order_by(patients.c.last_name, patients.c.first_name)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.db.execute(stmt)

        return PatientListResponse(
            total=total,
            page=page,
            page_size=page_size,
            items=[PatientResponse.model_validate(dict(row)) for row in result.mappings()],
        )
